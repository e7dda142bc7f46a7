#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import sys
import json
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from .config import get_testing_mode, load_config
from .extraction import extract_candidates
from .ics import event_to_ics
from .logger import setup_logger
from .models import ComponentType, EventDescriptor, ParsedPhrase, ParsingContext, ValidationResult
from .patterns import get_patterns
from .preview import extract_location, extract_summary
from .resolver import best_component, resolve_event
from .selection import select_components
from .utils import get_local_timezone
from .validator import validate_phrase

logger = setup_logger('calendar_nlp', testing=get_testing_mode())


class CalendarNLPProcessor:
    """Turns short phrases like "every tue 5pm" into calendar events.

    The processor owns one ParsingContext. It is never mutated: update_context
    swaps in a new one, and every parse works on the context it was given or
    the one current when the call started.
    """

    def __init__(self, reference_instant: Optional[datetime] = None, timezone: Optional[str] = None,
                 locale: Optional[str] = None, user_preferences: Optional[Dict] = None,
                 patterns=(), config: Optional[Dict] = None):
        self.config = config if config is not None else load_config()
        self.patterns = get_patterns(patterns)

        preferences = {
            'fuzzy_hours': self.config.get('fuzzy_hours') or {},
            'reminder_kind': self.config.get('reminder_kind', 'DISPLAY'),
        }
        preferences.update(user_preferences or {})
        self.context = ParsingContext(
            reference_instant=reference_instant or datetime.now(),
            timezone=timezone or self.config.get('timezone'),
            locale=locale or self.config.get('locale', 'en-US'),
            user_preferences=preferences,
        )
        logger.debug(f"Initialized with {len(self.patterns)} patterns, context {self.context}")

    def update_context(self, **changes) -> ParsingContext:
        """Replace the context with a copy carrying the given changes"""
        self.context = replace(self.context, **changes)
        return self.context

    def extract_candidates(self, text: str, context: Optional[ParsingContext] = None):
        return extract_candidates(text or '', self.patterns, context or self.context)

    def select_components(self, candidates) -> List:
        return select_components(candidates)

    def parse(self, text: str, context: Optional[ParsingContext] = None) -> ParsedPhrase:
        """Parse text into position-ordered, non-overlapping components"""
        context = context or self.context
        text = text or ''
        components = self.select_components(self.extract_candidates(text, context))
        logger.debug(f"Parsed {text!r}: {[c.source_text for c in components]}")
        return ParsedPhrase(original_text=text, components=tuple(components),
                            reference_instant=context.reference_instant, context=context)

    def get_components_by_type(self, phrase: ParsedPhrase, type: ComponentType):
        return list(phrase.components_of(type))

    def get_best_component(self, phrase: ParsedPhrase, type: ComponentType):
        return best_component(phrase, type)

    def validate(self, phrase: ParsedPhrase) -> ValidationResult:
        return validate_phrase(phrase)

    def resolve(self, phrase: ParsedPhrase, reject_invalid: bool = False,
                context: Optional[ParsingContext] = None) -> Optional[EventDescriptor]:
        """Resolve a phrase into an event; None only when rejecting an invalid phrase.

        Preferences and timezone come from the given context, else the one the
        phrase was parsed with, else the processor's current context.
        """
        if reject_invalid:
            validation = self.validate(phrase)
            if not validation.is_valid:
                logger.debug(f"Rejected {phrase.original_text!r}: {validation.warnings}")
                return None

        context = context or phrase.context or self.context
        event = resolve_event(phrase, context.user_preferences.get('reminder_kind', 'DISPLAY'))
        return replace(
            event,
            summary=extract_summary(phrase),
            location=extract_location(phrase),
            timezone=context.timezone or get_local_timezone(),
        )

    def parse_event(self, text: str) -> dict:
        """Run the whole pipeline and return a JSON-ready dict"""
        phrase = self.parse(text)
        validation = self.validate(phrase)
        event = self.resolve(phrase, reject_invalid=self.config.get('reject_invalid', False))
        return {
            'original_text': phrase.original_text,
            'components': [c.to_dict() for c in phrase.components],
            'event': event.to_dict() if event else None,
            'validation': validation.to_dict(),
        }


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    as_ics = '--ics' in args
    words = [arg for arg in args if arg != '--ics']
    if not words:
        print(json.dumps({"error": "No input provided"}))
        return 1

    text = " ".join(words)
    processor = CalendarNLPProcessor()
    if not as_ics:
        print(json.dumps(processor.parse_event(text), indent=2))
        return 0

    phrase = processor.parse(text)
    event = processor.resolve(phrase, reject_invalid=True)
    if event is None:
        for warning in processor.validate(phrase).warnings:
            print(f"Error parsing input: {warning}", file=sys.stderr)
        return 1
    sys.stdout.write(event_to_ics(event))
    return 0


if __name__ == "__main__":
    sys.exit(main())
