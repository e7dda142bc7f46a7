import unittest
from datetime import datetime, timedelta
import io
import json
import os
import sys
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

# Add the parent directory to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from natural_calendar.calendar_nlp import CalendarNLPProcessor, main
from natural_calendar.config import DEFAULT_CONFIG
from natural_calendar.models import ComponentType, EventDescriptor, ParsingContext, RecurrenceRule, Reminder

# Monday
REFERENCE = datetime(2024, 1, 15, 9, 0)


class TestCalendarNLP(unittest.TestCase):
    def setUp(self):
        """Set up a processor pinned to a known Monday"""
        self.processor = CalendarNLPProcessor(reference_instant=REFERENCE, timezone='UTC',
                                              config=dict(DEFAULT_CONFIG))

    def resolve(self, text):
        return self.processor.resolve(self.processor.parse(text))

    def test_weekday_with_time(self):
        """wed 10am on a Monday is this Wednesday at 10"""
        phrase = self.processor.parse("wed 10am")
        event = self.processor.resolve(phrase)
        self.assertEqual(event.start, datetime(2024, 1, 17, 10, 0))
        self.assertIsNone(event.end)
        self.assertIsNone(event.recurrence)
        self.assertTrue(self.processor.validate(phrase).is_valid)

    def test_tomorrow_with_duration(self):
        """Test relative date, time and duration together"""
        processor = CalendarNLPProcessor(reference_instant=datetime(2024, 1, 15), timezone='UTC',
                                         config=dict(DEFAULT_CONFIG))
        event = processor.resolve(processor.parse("tomorrow 3pm for 1hr"))
        self.assertEqual(event.start, datetime(2024, 1, 16, 15, 0))
        self.assertEqual(event.duration, "PT1H")
        self.assertIsNone(event.end)

    def test_recurrence_with_fuzzy_and_explicit_time(self):
        """The explicit 5pm wins over the afternoon default"""
        event = self.resolve("every tue afternoon 5pm at the office")
        self.assertEqual(event.recurrence, RecurrenceRule('WEEKLY', 1, ('TU',)))
        self.assertEqual((event.start.hour, event.start.minute), (17, 0))
        self.assertEqual(event.start.date(), datetime(2024, 1, 16).date())
        self.assertEqual(event.location, "the office")

    def test_interval(self):
        """A range is one INTERVAL component, not two times"""
        phrase = self.processor.parse("4pm to 8pm")
        self.assertEqual([c.type for c in phrase.components], [ComponentType.INTERVAL])
        event = self.processor.resolve(phrase)
        self.assertEqual(event.start, datetime(2024, 1, 15, 16, 0))
        self.assertEqual(event.end, datetime(2024, 1, 15, 20, 0))
        self.assertIsNone(event.duration)

    def test_no_temporal_reference(self):
        """Test text without any date or time"""
        phrase = self.processor.parse("new event")
        validation = self.processor.validate(phrase)
        self.assertFalse(validation.is_valid)
        self.assertIn(ComponentType.TIME, validation.missing_types)
        self.assertIn(ComponentType.DATE, validation.missing_types)
        self.assertIn("No temporal reference found", validation.warnings)

        # The resolver still produces a best-effort event
        event = self.processor.resolve(phrase)
        self.assertEqual(event.start, REFERENCE)
        self.assertEqual(event.summary, "new event")
        self.assertIsNone(self.processor.resolve(phrase, reject_invalid=True))

    def test_example_phrases(self):
        """Test the example phrases end to end"""
        test_cases = [
            ("this wed new event 10am", datetime(2024, 1, 17, 10, 0), "new event"),
            ("every mon 9am", datetime(2024, 1, 15, 9, 0), None),
            ("fri 3pm rem 15 mins before", datetime(2024, 1, 19, 15, 0), None),
            ("next tue 2pm", datetime(2024, 1, 16, 14, 0), None),
            ("jan 20th 3:30pm", datetime(2024, 1, 20, 15, 30), None),
            ("every other sat 9am", datetime(2024, 1, 20, 9, 0), None),
            ("mon, thu & sat 2pm", datetime(2024, 1, 15, 14, 0), None),
            ("lunch @ Starbucks tomorrow 1pm", datetime(2024, 1, 16, 13, 0), "lunch"),
        ]

        for input_text, expected_start, expected_summary in test_cases:
            with self.subTest(input_text=input_text):
                event = self.resolve(input_text)
                self.assertEqual(event.start, expected_start)
                self.assertEqual(event.summary, expected_summary)

    def test_recurrence(self):
        """Test recurrence pattern parsing"""
        test_cases = [
            ("team sync every monday at 10am", "FREQ=WEEKLY;BYDAY=MO"),
            ("meeting every friday at 2pm", "FREQ=WEEKLY;BYDAY=FR"),
            ("standup every day at 9am", "FREQ=DAILY"),
            ("standup daily 9am", "FREQ=DAILY"),
            ("review every other sat 9am", "FREQ=WEEKLY;INTERVAL=2;BYDAY=SA"),
            ("meeting every monday and wednesday at 2pm", "FREQ=WEEKLY;BYDAY=MO,WE"),
            ("class mon, thu & sat 2pm", "FREQ=WEEKLY;BYDAY=MO,TH,SA"),
            ("meeting every MONDAY at 2pm", "FREQ=WEEKLY;BYDAY=MO"),
            ("meeting every monday until 12/31", "FREQ=WEEKLY;BYDAY=MO;UNTIL=20241231T235959Z"),
            ("rent monthly", "FREQ=MONTHLY"),
        ]

        for input_text, expected_recurrence in test_cases:
            with self.subTest(input_text=input_text):
                event = self.resolve(input_text)
                self.assertEqual(event.recurrence.to_rrule_string(), expected_recurrence)

    def test_time_parsing(self):
        """Test various time formats"""
        test_cases = [
            ("dinner at 7p", "7:00 PM"),
            ("meeting at 2pm", "2:00 PM"),
            ("lunch at 12p", "12:00 PM"),
            ("coffee at 9a", "9:00 AM"),
            ("meeting at 3:30pm", "3:30 PM"),
            ("call at 11:45a", "11:45 AM"),
            ("meeting at 12am", "12:00 AM"),
            ("meeting at  2 pm", "2:00 PM"),
            ("meeting at 2PM", "2:00 PM"),
            ("dinner 6 pm", "6:00 PM"),
            ("standup 15:30", "3:30 PM"),
            ("standup 1530", "3:30 PM"),
            ("lunch noon", "12:00 PM"),
        ]

        for input_text, expected_time in test_cases:
            with self.subTest(input_text=input_text):
                event = self.resolve(input_text)
                self.assertEqual(event.start.strftime('%-I:%M %p'), expected_time)

    def test_meridiem_law(self):
        """pm adds twelve except at 12, am maps 12 to midnight"""
        for hour in range(1, 13):
            with self.subTest(hour=hour):
                pm = self.processor.parse(f"{hour}pm").components[0].value
                am = self.processor.parse(f"{hour}am").components[0].value
                self.assertEqual(pm.hour, 12 if hour == 12 else hour + 12)
                self.assertEqual(am.hour, 0 if hour == 12 else hour)

    def test_weekday_advance_law(self):
        """A bare weekday always lands 1 to 7 days after the reference date"""
        for offset in range(7):
            reference = REFERENCE + timedelta(days=offset)
            context = ParsingContext(reference_instant=reference)
            for name in ['mon', 'tue', 'wed', 'thu', 'fri', 'sat', 'sun']:
                with self.subTest(reference=reference.date(), weekday=name):
                    event = self.processor.resolve(self.processor.parse(name, context))
                    days_ahead = (event.start.date() - reference.date()).days
                    self.assertGreaterEqual(days_ahead, 1)
                    self.assertLessEqual(days_ahead, 7)

    def test_components_are_ordered_and_disjoint(self):
        """Selected components never overlap and their offsets slice the source text"""
        test_cases = [
            "every tue afternoon 5pm at the office",
            "meeting tomorrow 4pm to 8pm remind me 15 min before",
            "jan 15th, 2025 9:30am-11:30am",
            "mon, thu & sat 2pm and every other fri 1530",
            "",
            "nothing here",
        ]

        for text in test_cases:
            with self.subTest(text=text):
                components = self.processor.parse(text).components
                for component in components:
                    self.assertTrue(0 <= component.start < component.end <= len(text))
                    self.assertEqual(text[component.start:component.end], component.source_text)
                    self.assertTrue(0 <= component.confidence <= 1)
                for first, second in zip(components, components[1:]):
                    self.assertLessEqual(first.end, second.start)

    def test_resolution_is_repeatable(self):
        """Re-resolving the same text gives the same event"""
        text = "every tue afternoon 5pm at the office remind me 10 minutes before"
        first = self.resolve(text)
        second = self.resolve(text)
        self.assertEqual(first, second)

    def test_ambiguous_times(self):
        """Two times are flagged but the first still resolves"""
        phrase = self.processor.parse("call 3pm or 4pm")
        validation = self.processor.validate(phrase)
        self.assertTrue(validation.is_valid)
        self.assertIn("Multiple time components found - may be ambiguous", validation.warnings)
        self.assertEqual(self.processor.resolve(phrase).start.hour, 15)

    def test_invalid_inputs(self):
        """Malformed values are dropped instead of raising"""
        test_cases = [
            "meeting at 13pm",
            "call at 25:00",
            "meeting at",
            "feb 30 lunch",
        ]

        for input_text in test_cases:
            with self.subTest(input_text=input_text):
                phrase = self.processor.parse(input_text)
                self.assertFalse(phrase.components_of(ComponentType.TIME))
                self.assertFalse(phrase.components_of(ComponentType.DATE))
                self.assertIsNotNone(self.processor.resolve(phrase))

    def test_huge_numbers_still_resolve(self):
        """Offsets, durations and counts far beyond the calendar never raise"""
        test_cases = [
            "in 9999999 days",
            "in 99999999999999 weeks",
            "call for " + "9" * 400 + " hours",
            "call for " + "9" * 400 + " min",
            "offsite for 99999999999 days",
            "every 99999999 days",
            "every mon 99999999999 times",
            "rem 99999999 min before",
        ]

        for input_text in test_cases:
            with self.subTest(input_text=input_text[:30]):
                event = self.processor.resolve(self.processor.parse(input_text))
                self.assertIsInstance(event, EventDescriptor)

    def test_unreachable_offsets_are_dropped(self):
        phrase = self.processor.parse("in 9999999 days")
        self.assertFalse(phrase.components_of(ComponentType.DATE))
        self.assertEqual(self.processor.resolve(phrase).start, REFERENCE)
        event = self.processor.resolve(self.processor.parse("call for " + "9" * 400 + " hours"))
        self.assertIsNone(event.duration)

    def test_end_of_calendar(self):
        """Days past 9999-12-31 leave the start on the reference date"""
        context = ParsingContext(reference_instant=datetime(9999, 12, 31, 9, 0), timezone='UTC')
        test_cases = [
            "tomorrow 3pm",
            "next mon",
            "in 3 days",
            "sun 9am",
            "every sun 9am",
            "mon, wed 2pm",
        ]

        for input_text in test_cases:
            with self.subTest(input_text=input_text):
                event = self.processor.resolve(self.processor.parse(input_text, context))
                self.assertEqual(event.start.date(), datetime(9999, 12, 31).date())

    def test_resolve_uses_the_parsing_context(self):
        """A phrase parsed with its own context keeps that context's preferences"""
        context = ParsingContext(reference_instant=REFERENCE, timezone='Europe/Paris',
                                 user_preferences={'reminder_kind': 'AUDIO'})
        phrase = self.processor.parse("fri 3pm rem 15 mins before", context)
        self.processor.update_context(timezone='Asia/Tokyo')

        event = self.processor.resolve(phrase)
        self.assertEqual(event.timezone, 'Europe/Paris')
        self.assertEqual(event.reminders, (Reminder(15, 'AUDIO'),))

        event = self.processor.resolve(phrase, context=self.processor.context)
        self.assertEqual(event.timezone, 'Asia/Tokyo')
        self.assertEqual(event.reminders, (Reminder(15, 'DISPLAY'),))

    def test_context_is_replaced_not_mutated(self):
        """update_context swaps the context and leaves snapshots alone"""
        before = self.processor.context
        after = self.processor.update_context(reference_instant=datetime(2024, 2, 1))
        self.assertIsNot(before, after)
        self.assertEqual(before.reference_instant, REFERENCE)
        self.assertEqual(self.processor.parse("wed", before).reference_instant, REFERENCE)
        self.assertEqual(self.processor.parse("wed").reference_instant, datetime(2024, 2, 1))

    def test_parse_event(self):
        """Test the JSON-ready pipeline output"""
        result = self.processor.parse_event("meeting tomorrow 3pm remind me 15 min before")
        self.assertEqual(result['event']['start'], '2024-01-16T15:00:00')
        self.assertEqual(result['event']['reminders'][0]['trigger'], '-PT15M')
        self.assertEqual(result['event']['summary'], 'meeting')
        self.assertTrue(result['validation']['is_valid'])
        self.assertEqual([c['type'] for c in result['components']], ['date', 'time'])

    def test_parse_event_rejects_when_configured(self):
        config = dict(DEFAULT_CONFIG, reject_invalid=True)
        processor = CalendarNLPProcessor(reference_instant=REFERENCE, timezone='UTC', config=config)
        result = processor.parse_event("new event")
        self.assertIsNone(result['event'])
        self.assertEqual(result['validation']['missing'], ['time', 'date'])


@mock.patch('natural_calendar.calendar_nlp.get_local_timezone', return_value='UTC')
@mock.patch('natural_calendar.calendar_nlp.load_config', return_value=dict(DEFAULT_CONFIG))
class TestMain(unittest.TestCase):
    def test_no_input(self, *mocks):
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(main([]), 1)
        self.assertEqual(json.loads(out.getvalue()), {"error": "No input provided"})

    def test_json_output(self, *mocks):
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(main(["lunch", "tomorrow", "1pm"]), 0)
        result = json.loads(out.getvalue())
        self.assertEqual(result['event']['summary'], 'lunch')
        self.assertEqual(result['event']['timezone'], 'UTC')

    def test_ics_output(self, *mocks):
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(main(["--ics", "lunch", "tomorrow", "1pm"]), 0)
        self.assertTrue(out.getvalue().startswith("BEGIN:VCALENDAR\r\n"))
        self.assertIn("SUMMARY:lunch\r\n", out.getvalue())

    def test_ics_output_rejects_invalid(self, *mocks):
        err = io.StringIO()
        with redirect_stdout(io.StringIO()), redirect_stderr(err):
            self.assertEqual(main(["--ics", "new", "event"]), 1)
        self.assertIn("No temporal reference found", err.getvalue())


if __name__ == '__main__':
    unittest.main()
