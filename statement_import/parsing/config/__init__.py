# Template configuration submodule
from .template import (
    NO_SEPARATOR, FieldDef, KeyDef, RegexRule, Replacement, RuleRole,
    Section, SectionKind, StatementTemplate, VariableMode,
)
from .registry import TemplateRegistry, parse_template, parse_section

__all__ = [
    'NO_SEPARATOR', 'FieldDef', 'KeyDef', 'RegexRule', 'Replacement', 'RuleRole',
    'Section', 'SectionKind', 'StatementTemplate', 'VariableMode',
    'TemplateRegistry', 'parse_template', 'parse_section',
]
