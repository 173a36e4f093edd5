"""Lexer and parser for the JavaScript/TypeScript module subset route files use."""

from routeatlas.parsing.parser import is_jsx_path, parse_module
from routeatlas.parsing.tokenizer import SourceSyntaxError, TokenizeError

__all__ = ["SourceSyntaxError", "TokenizeError", "is_jsx_path", "parse_module"]
