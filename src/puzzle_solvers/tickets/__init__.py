"""Ticket field engine: field rules, document parser, and field-order resolution."""

from puzzle_solvers.tickets.models import FieldRule, Ticket, TicketDocument, ValueRange
from puzzle_solvers.tickets.parser import (
    NEARBY_TICKETS_HEADER,
    YOUR_TICKET_HEADER,
    TicketParseError,
    load_ticket_document,
    parse_field_rule,
    parse_ticket,
    parse_ticket_document,
)
from puzzle_solvers.tickets.sorting import (
    AmbiguousFieldOrderError,
    FieldAssignment,
    FieldOrderError,
    TicketScan,
    departure_product,
    get_valid_tickets,
    is_valid_value,
    scan_tickets,
    sort_fields,
)

__all__ = [
    "NEARBY_TICKETS_HEADER",
    "YOUR_TICKET_HEADER",
    "AmbiguousFieldOrderError",
    "FieldAssignment",
    "FieldOrderError",
    "FieldRule",
    "Ticket",
    "TicketDocument",
    "TicketParseError",
    "TicketScan",
    "ValueRange",
    "departure_product",
    "get_valid_tickets",
    "is_valid_value",
    "load_ticket_document",
    "parse_field_rule",
    "parse_ticket",
    "parse_ticket_document",
    "scan_tickets",
    "sort_fields",
]
