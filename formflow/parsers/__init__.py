"""Document parsers"""
from .flow_parser import load_answers, load_flow, parse_flow
from .yaml_parser import YAMLParser

__all__ = ["YAMLParser", "load_answers", "load_flow", "parse_flow"]
