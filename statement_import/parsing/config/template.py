"""
Statement Template Definitions

Typed, immutable description of how one bank export is split into sections
and how values are extracted from the lines of each section.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Pattern, Tuple, Union

# fieldSeparator value that switches a table to fixed-width columns
NO_SEPARATOR = '#None#'


class SectionKind(str, Enum):
    IGNORE = 'ignore'
    KEY_VALUE = 'keyvalue'
    TABLE = 'table'
    DYNAMIC_TABLE = 'dyn_table'


class VariableMode(str, Enum):
    """
    How a parsed value is merged into its target.

    ALWAYS overwrites, ONLY_WHEN_EMPTY keeps an existing value.
    """
    ALWAYS = 'always'
    ONLY_WHEN_EMPTY = 'onlywhenempty'


class RuleRole(str, Enum):
    PRIMARY = 'primary'
    ADDITIONAL = 'additional'


@dataclass(frozen=True)
class FieldDef:
    """
    Positional column of a table section.

    Attributes:
        name: Column label in the source document (documentation only)
        variable: Target variable, empty to skip the column
        length: Fixed width for '#None#' tables; 0 takes the rest of the line
        multiplier: Applied to amounts (sign handling)
    """
    name: str
    variable: str = ''
    length: int = 0
    multiplier: int = 1


@dataclass(frozen=True)
class RegexRule:
    """
    Regular expression applied to a whole table line. Every non-empty named
    group is assigned to the variable of the same name.
    """
    pattern: Pattern
    multiplier: int = 1
    role: RuleRole = RuleRole.PRIMARY
    max_occurrence: Optional[int] = None

    @property
    def is_primary(self) -> bool:
        return self.role == RuleRole.PRIMARY


@dataclass(frozen=True)
class KeyDef:
    name: str
    variable: str
    mode: VariableMode = VariableMode.ALWAYS


Column = Union[FieldDef, RegexRule]


@dataclass(frozen=True)
class Section:
    name: str
    kind: SectionKind
    end_keywords: Tuple[str, ...] = ()
    separator: str = ';'
    field_separator: str = ';'
    record_length: int = 0
    contains_header: bool = False
    remove_duplicates: bool = False
    stop_on_error: bool = False
    ignore_keywords: Tuple[str, ...] = ()
    columns: Tuple[Column, ...] = ()
    keys: Tuple[KeyDef, ...] = ()

    @property
    def fields(self) -> Tuple[FieldDef, ...]:
        return tuple(c for c in self.columns if isinstance(c, FieldDef))

    @property
    def rules(self) -> Tuple[RegexRule, ...]:
        return tuple(c for c in self.columns if isinstance(c, RegexRule))

    @property
    def is_fixed_width(self) -> bool:
        return self.field_separator == NO_SEPARATOR

    def ends_at(self, line: str) -> bool:
        return any(kw in line for kw in self.end_keywords)

    def ignores(self, line: str) -> bool:
        return any(kw in line for kw in self.ignore_keywords)


@dataclass(frozen=True)
class Replacement:
    search: str
    replace: str


@dataclass(frozen=True)
class StatementTemplate:
    """
    One layout variant of a bank export.

    Attributes:
        name: Human-readable template name
        source: Source kind the template belongs to (e.g. 'ing_csv')
        sections: Sections in document order
        replacements: Literal text fixes applied to subject, description
            and counterparty values
        date_formats: strptime formats tried in order
        decimal_separator / thousands_separator: Amount notation
    """
    name: str
    source: str
    sections: Tuple[Section, ...]
    replacements: Tuple[Replacement, ...] = ()
    date_formats: Tuple[str, ...] = ('%d.%m.%Y', '%d.%m.%y', '%Y-%m-%d')
    decimal_separator: str = ','
    thousands_separator: str = '.'

    def apply_replacements(self, text: Optional[str]) -> Optional[str]:
        if text is None:
            return None
        for r in self.replacements:
            if r.search:
                text = text.replace(r.search, r.replace)
        return text
