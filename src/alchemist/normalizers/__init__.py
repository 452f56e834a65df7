from alchemist.normalizers.fields import (
    ParseResult,
    PhaseSyntax,
    as_text,
    canonical_phases,
    detect_phase_syntax,
    is_blank,
    parse_int,
    parse_json_attributes,
    parse_phases,
    split_list,
    split_set,
)

__all__ = [
    "ParseResult",
    "PhaseSyntax",
    "as_text",
    "canonical_phases",
    "detect_phase_syntax",
    "is_blank",
    "parse_int",
    "parse_json_attributes",
    "parse_phases",
    "split_list",
    "split_set",
]
