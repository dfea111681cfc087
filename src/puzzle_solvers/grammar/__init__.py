"""Message grammar engine: rule variants, parser, and full-string matcher."""

from puzzle_solvers.grammar.matcher import (
    ROOT_RULE_ID,
    check_string,
    count_matching,
    match_rule,
)
from puzzle_solvers.grammar.parser import (
    MessageInput,
    RuleParseError,
    load_message_rules,
    parse_message_rules,
    parse_rule_body,
)
from puzzle_solvers.grammar.rules import (
    Alternation,
    Literal,
    Reference,
    Rule,
    RuleSet,
    RuleSetError,
    Sequence,
    SequenceAlternation,
    referenced_ids,
)

__all__ = [
    "ROOT_RULE_ID",
    "Alternation",
    "Literal",
    "MessageInput",
    "Reference",
    "Rule",
    "RuleParseError",
    "RuleSet",
    "RuleSetError",
    "Sequence",
    "SequenceAlternation",
    "check_string",
    "count_matching",
    "load_message_rules",
    "match_rule",
    "parse_message_rules",
    "parse_rule_body",
    "referenced_ids",
]
