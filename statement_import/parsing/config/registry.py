"""
Template Registry

Loads statement templates from JSON files and hands them out per source kind.
"""
import os
import re
import json
import logging
from typing import Dict, List, Optional
from .template import (
    FieldDef, KeyDef, RegexRule, Replacement, RuleRole, Section, SectionKind,
    StatementTemplate, VariableMode,
)
from ..exceptions import TemplateConfigurationError

logger = logging.getLogger(__name__)


def _enum_value(enum_cls, raw, what: str):
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        raise TemplateConfigurationError(f"Unknown {what}: {raw!r}")


def _split_keywords(raw) -> tuple:
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = raw.split('|')
    # blank alternatives would match every line
    return tuple(kw for kw in raw if kw and kw.strip())


def _parse_column(data: dict):
    if 'pattern' in data:
        try:
            pattern = re.compile(data['pattern'])
        except re.error as e:
            raise TemplateConfigurationError(f"Invalid pattern {data['pattern']!r}: {e}")
        max_occurrence = data.get('max_occurrence')
        return RegexRule(
            pattern=pattern,
            multiplier=int(data.get('multiplier', 1)),
            role=_enum_value(RuleRole, data.get('role', 'primary'), 'rule role'),
            max_occurrence=int(max_occurrence) if max_occurrence else None,
        )
    return FieldDef(
        name=data.get('name', ''),
        variable=data.get('variable') or '',
        length=int(data.get('length', 0) or 0),
        multiplier=int(data.get('multiplier', 1)),
    )


def parse_section(data: dict) -> Section:
    """Converts a section dict to a Section."""
    kind = _enum_value(SectionKind, data.get('type'), 'section type')
    keys = tuple(
        KeyDef(
            name=k['name'],
            variable=k.get('variable') or '',
            mode=_enum_value(VariableMode, k.get('mode', 'always'), 'variable mode'),
        )
        for k in data.get('keys', [])
    )
    return Section(
        name=data.get('name', kind.value),
        kind=kind,
        end_keywords=_split_keywords(data.get('end_keywords')),
        separator=data.get('separator') or ';',
        field_separator=data.get('field_separator') or ';',
        record_length=int(data.get('record_length', 0) or 0),
        contains_header=bool(data.get('contains_header', False)),
        remove_duplicates=bool(data.get('remove_duplicates', False)),
        stop_on_error=bool(data.get('stop_on_error', False)),
        ignore_keywords=_split_keywords(data.get('ignore_keywords')),
        columns=tuple(_parse_column(c) for c in data.get('columns', [])),
        keys=keys,
    )


def parse_template(data: dict, source: str = '') -> StatementTemplate:
    """Converts a template dict to a StatementTemplate."""
    if not data.get('sections'):
        raise TemplateConfigurationError(f"Template {data.get('name')!r} has no sections")

    options = {}
    if 'date_formats' in data:
        options['date_formats'] = tuple(data['date_formats'])
    if 'decimal_separator' in data:
        options['decimal_separator'] = data['decimal_separator']
    if 'thousands_separator' in data:
        options['thousands_separator'] = data['thousands_separator']

    return StatementTemplate(
        name=data.get('name', 'unnamed'),
        source=data.get('source', source),
        sections=tuple(parse_section(s) for s in data['sections']),
        replacements=tuple(
            Replacement(search=r.get('from', ''), replace=r.get('to', ''))
            for r in data.get('replacements', [])
        ),
        **options,
    )


class TemplateRegistry:
    """
    Registry for statement templates.

    Each JSON file holds the templates of one source kind:

        {"source": "ing_csv", "templates": [{...}, {...}]}

    Templates keep their file order; that order is the order in which
    they are tried against a statement.
    """

    def __init__(self, templates_dir: str, strict: bool = False):
        """
        Args:
            templates_dir: Directory containing the .json template files
            strict: Raise on malformed files instead of logging and skipping them
        """
        self.templates_dir = templates_dir
        self.strict = strict
        self._templates: Dict[str, List[StatementTemplate]] = {}
        self._load_templates()

    def _load_templates(self) -> None:
        if not os.path.exists(self.templates_dir):
            logger.warning(f"Templates directory not found: {self.templates_dir}")
            return

        for fname in sorted(os.listdir(self.templates_dir)):
            if not fname.endswith(".json"):
                continue
            fpath = os.path.join(self.templates_dir, fname)
            try:
                with open(fpath, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._add_file(data)
                logger.debug(f"Loaded templates: {fname}")
            except (OSError, ValueError, KeyError, TemplateConfigurationError) as e:
                if self.strict:
                    raise
                logger.error(f"Error loading templates {fname}: {e}")

    def _add_file(self, data: dict) -> None:
        source = data['source']
        parsed = [parse_template(t, source) for t in data.get('templates', [])]
        self._templates.setdefault(source, []).extend(parsed)

    def templates_for(self, source: str) -> List[StatementTemplate]:
        """Templates of a source kind, in the order they should be tried."""
        return list(self._templates.get(source, []))

    def get_by_name(self, name: str) -> Optional[StatementTemplate]:
        for templates in self._templates.values():
            for template in templates:
                if template.name == name:
                    return template
        return None

    def list_templates(self) -> List[str]:
        return [t.name for templates in self._templates.values() for t in templates]

    def sources(self) -> List[str]:
        return list(self._templates.keys())
