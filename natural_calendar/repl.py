#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import sys
import json

from dateutil import parser

from .calendar_nlp import CalendarNLPProcessor
from .config import get_testing_mode
from .logger import setup_logger
from .models import ComponentType
from .preview import describe_event, upcoming_occurrences

logger = setup_logger('repl', testing=get_testing_mode())

EXAMPLES = [
    'this wed new event 10am',
    'every tue afternoon 5pm at the office',
    'wed 10am',
    'tomorrow 3pm for 1hr',
    'every mon 9am',
    'fri 3pm rem 15 mins before',
    'next tue 2pm',
    'jan 15th 3:30pm',
    'every other sat 9am',
    'mon, thu & sat 2pm',
]

HELP = """
Available Commands:
------------------------------
parse <text>     - Parse natural language into an event
details <text>   - Show detailed parsing analysis
config           - Show current configuration
set <prop> <val> - Set timezone, locale or refdate
examples         - Show example phrases
clear            - Clear the screen
help             - Show this help
exit/quit        - Exit the REPL

You can also just type text directly to parse it!"""


class CalendarREPL:
    prompt = 'calendar> '

    def __init__(self, processor=None, out=None):
        self.processor = processor or CalendarNLPProcessor()
        self.out = out or sys.stdout
        self.commands = {
            'help': lambda args: self.say(HELP),
            'parse': self.parse_input,
            'details': self.show_details,
            'config': lambda args: self.show_config(),
            'set': self.set_config,
            'examples': lambda args: self.show_examples(),
            'clear': lambda args: self.say('\033[2J\033[H'),
        }

    def say(self, text=''):
        print(text, file=self.out)

    def handle_command(self, line):
        """Run one input line; returns False when the session should end"""
        line = line.strip()
        if not line:
            return True
        command, _, rest = line.partition(' ')
        command = command.lower()
        if command in ('exit', 'quit'):
            return False
        handler = self.commands.get(command)
        if handler:
            handler(rest.strip())
        else:
            self.show_details(line)
            self.parse_input(line)
        return True

    def parse_input(self, text):
        if not text:
            self.say('Please provide text to parse')
            return
        phrase = self.processor.parse(text)
        validation = self.processor.validate(phrase)
        event = self.processor.resolve(phrase)

        self.say('\nEvent:')
        self.say(json.dumps(event.to_dict(), indent=2))
        self.say(describe_event(event, phrase.reference_instant))
        if event.recurrence:
            self.say('Next: ' + ', '.join(
                moment.strftime('%a %b %-d %-I:%M %p') for moment in upcoming_occurrences(event)))
        if validation.warnings:
            self.say('\nWarnings:')
            for warning in validation.warnings:
                self.say(f'  - {warning}')

    def show_details(self, text):
        if not text:
            self.say('Please provide text to analyze')
            return
        self.say('-' * 50)
        phrase = self.processor.parse(text)
        if not phrase.components:
            self.say('No components found')
        for component_type in ComponentType:
            components = phrase.components_of(component_type)
            if components:
                self.say(f'\n  {component_type.value}:')
                for component in components:
                    self.say(f'    - "{component.source_text}" (confidence: {component.confidence})')

    def show_config(self):
        context = self.processor.context
        self.say('\nCurrent Configuration:')
        self.say('-' * 30)
        self.say(f'Reference Date: {context.reference_instant.isoformat()}')
        self.say(f'Timezone: {context.timezone}')
        self.say(f'Locale: {context.locale}')
        self.say(f'Patterns: {len(self.processor.patterns)}')

    def set_config(self, args):
        prop, _, value = args.partition(' ')
        value = value.strip()
        if not prop or not value:
            self.say('Usage: set <property> <value>')
            self.say('Available properties: timezone, locale, refdate')
            return

        prop = prop.lower()
        if prop == 'timezone':
            self.processor.update_context(timezone=value)
            self.say(f'Timezone set to: {value}')
        elif prop == 'locale':
            self.processor.update_context(locale=value)
            self.say(f'Locale set to: {value}')
        elif prop == 'refdate':
            try:
                reference = parser.parse(value)
            except (ValueError, OverflowError) as e:
                logger.debug(f"Invalid refdate {value!r}: {e}")
                self.say('Invalid date format. Use ISO format (e.g., 2024-01-15)')
                return
            self.processor.update_context(reference_instant=reference)
            self.say(f'Reference date set to: {reference.isoformat()}')
        else:
            self.say('Unknown property. Available: timezone, locale, refdate')

    def show_examples(self):
        self.say('\nExample Phrases:')
        self.say('-' * 30)
        for index, example in enumerate(EXAMPLES, 1):
            self.say(f'{index}. "{example}"')

    def run(self):
        self.say('Natural Language Calendar REPL')
        self.say('Type "help" for available commands, "exit" to quit\n')
        while True:
            try:
                line = input(self.prompt)
            except (EOFError, KeyboardInterrupt):
                break
            if not self.handle_command(line):
                break
        self.say('\nGoodbye!')


def main():
    CalendarREPL().run()
    return 0


if __name__ == '__main__':
    sys.exit(main())
