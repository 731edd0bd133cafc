"""Tests for command parser."""

import json
import logging
import unittest

from command_parser import (
    CommandParser,
    PROMPT_REGRESSION_CASES,
    build_unified_prompt,
    parse_unified_output,
)
from home_interpreter.demo_data import DEMO_DEVICES
from home_interpreter.models import ALL_ROOMS

ROOMS = ["Kitchen", "Bedroom", "Living Room"]


def _dump(payload):
    return json.dumps(payload, ensure_ascii=False)


class TestCommandParser(unittest.TestCase):
    """Unit tests for command parser."""

    def test_parse_valid_single_command(self):
        parser = CommandParser()
        result = parser.parse(
            _dump(
                {
                    "success": True,
                    "command": {
                        "room": "Kitchen",
                        "command": "Turn On",
                        "device_filter": "light",
                        "parameters": {"brightness": 80},
                    },
                    "room_matching": {
                        "original": "kithen",
                        "matched": "Kitchen",
                        "method": "fuzzy",
                        "confidence": 0.86,
                    },
                }
            ),
            ROOMS,
        )

        self.assertTrue(result.success)
        self.assertFalse(result.degraded)
        self.assertFalse(result.fallback_needed)
        self.assertEqual(result.command.command, "turn_on")
        self.assertEqual(result.command.room, "Kitchen")
        self.assertEqual(result.command.device_filter, "light")
        self.assertEqual(result.command.parameters, {"brightness": 80})
        validation = result.room_matching[0]
        self.assertTrue(validation.valid)
        self.assertEqual(validation.original, "kithen")
        self.assertEqual(validation.confidence, 0.86)

    def test_json_wrapped_in_text(self):
        raw = 'Sure, here it is: {"success": true, "command": {"room": "Bedroom", "command": "dim"}} Done.'
        result = parse_unified_output(raw, ROOMS)
        self.assertTrue(result.success)
        self.assertEqual(result.command.room, "Bedroom")

    def test_parse_dict_input(self):
        result = parse_unified_output({"command": {"room": "Kitchen", "command": "turn_off"}}, ROOMS)
        self.assertTrue(result.success)
        self.assertIn('"turn_off"', result.raw_output)

    def test_parse_multi_command(self):
        result = parse_unified_output(
            _dump(
                {
                    "success": True,
                    "commands": [
                        {"room": "Kitchen", "command": "turn_on", "device_filter": "light"},
                        {"room": "Living Room", "command": "play music"},
                    ],
                    "room_matching": {
                        "kitchen": {"matched": "Kitchen", "method": "exact", "confidence": 1.0},
                        "living room": {"matched": "Living Room", "method": "exact", "confidence": 1.0},
                    },
                }
            ),
            ROOMS,
        )

        self.assertTrue(result.command.is_multi)
        self.assertEqual(
            [(c.command, c.room) for c in result.command.flatten()],
            [("turn_on", "Kitchen"), ("play_music", "Living Room")],
        )
        self.assertEqual([v.original for v in result.room_matching], ["kitchen", "living room"])

    def test_exact_method_forces_full_confidence(self):
        result = parse_unified_output(
            {
                "command": {"room": "Kitchen", "command": "turn_on"},
                "room_matching": {"original": "kitchen", "matched": "Kitchen", "method": "exact", "confidence": 0.4},
            },
            ROOMS,
        )
        self.assertEqual(result.room_matching[0].match.confidence, 1.0)

    def test_non_exact_confidence_capped(self):
        result = parse_unified_output(
            {
                "command": {"room": "Kitchen", "command": "turn_on"},
                "room_matching": {"original": "kök", "matched": "Kitchen", "method": "semantic", "confidence": 1.0},
            },
            ROOMS,
        )
        self.assertEqual(result.room_matching[0].confidence, 0.95)

    def test_invalid_method_becomes_semantic(self):
        result = parse_unified_output(
            {
                "command": {"room": "Kitchen", "command": "turn_on"},
                "room_matching": {"original": "kök", "matched": "Kitchen", "method": "magic", "confidence": 0.7},
            },
            ROOMS,
        )
        self.assertEqual(result.room_matching[0].match.method, "semantic")
        self.assertIn("room_matching_method_invalid", result.errors)
        self.assertTrue(result.degraded)
        self.assertTrue(result.success)

    def test_room_outside_list_penalized(self):
        result = parse_unified_output(
            {
                "command": {"room": "Garage", "command": "turn_on"},
                "room_matching": {"original": "garage", "matched": "Garage", "method": "fuzzy", "confidence": 0.8},
            },
            ROOMS,
        )
        validation = result.room_matching[0]
        self.assertFalse(validation.valid)
        self.assertEqual(validation.confidence, 0.6)
        self.assertIn("room_matching_not_in_list", result.errors)
        self.assertTrue(result.degraded)

    def test_unmatched_room_keeps_alternatives(self):
        result = parse_unified_output(
            {
                "success": True,
                "command": {"room": "Kitchen", "command": "turn_on"},
                "room_matching": {"original": "attic", "matched": "", "alternatives": ["Bedroom"]},
            },
            ROOMS,
        )
        validation = result.room_matching[0]
        self.assertEqual(validation.match.method, "none")
        self.assertEqual(validation.match.suggestions, ("Bedroom",))

    def test_status_query(self):
        result = parse_unified_output(
            {"success": True, "query_type": "status", "room": "Kitchen", "scope": "room"}, ROOMS
        )
        self.assertTrue(result.is_status_query)
        self.assertEqual(result.query_scope, "room")
        self.assertEqual(result.room, "Kitchen")
        self.assertIsNone(result.command)

    def test_status_query_invalid_scope(self):
        result = parse_unified_output({"query_type": "status", "scope": "house"}, ROOMS)
        self.assertEqual(result.query_scope, "global")
        self.assertIn("query_scope_invalid", result.errors)

    def test_llm_reported_failure(self):
        result = parse_unified_output(
            {"success": False, "error": "Unknown room", "suggestions": ["Kitchen", 3]}, ROOMS
        )
        self.assertFalse(result.success)
        self.assertFalse(result.fallback_needed)
        self.assertTrue(result.degraded)
        self.assertEqual(result.error, "Unknown room")
        self.assertEqual(result.suggestions, ["Kitchen"])

    def test_missing_action_needs_fallback(self):
        result = parse_unified_output({"command": {"room": "Kitchen"}}, ROOMS)
        self.assertTrue(result.fallback_needed)
        self.assertIsNone(result.command)
        self.assertIn("command_action_missing", result.errors)

    def test_missing_room_means_all_rooms(self):
        result = parse_unified_output({"command": {"command": "turn_off"}}, ROOMS)
        self.assertTrue(result.success)
        self.assertEqual(result.command.room, ALL_ROOMS)
        self.assertIn("command_room_missing", result.errors)

    def test_device_id_wins_over_room(self):
        result = parse_unified_output(
            {"command": {"command": "turn_on", "room": "Kitchen", "device_id": "light-3"}}, ROOMS
        )
        self.assertEqual(result.command.device_id, "light-3")
        self.assertIsNone(result.command.room)

    def test_invalid_parameters_dropped(self):
        result = parse_unified_output(
            {"command": {"command": "dim", "room": "Kitchen", "parameters": {"level": 40, "fast": True, "curve": [1]}}},
            ROOMS,
        )
        self.assertEqual(result.command.parameters, {"level": 40})
        self.assertEqual(result.errors.count("command_parameter_invalid"), 2)

    def test_invalid_outputs(self):
        cases = {
            "": "output_empty",
            "not json at all": "json_decode_error",
            "[1, 2]": "json_decode_error",
            123: "output_not_string",
        }
        for raw, error in cases.items():
            result = parse_unified_output(raw, ROOMS)
            self.assertTrue(result.fallback_needed, raw)
            self.assertFalse(result.success)
            self.assertIn(error, result.errors)

    def test_empty_object_needs_fallback(self):
        result = parse_unified_output("{}", ROOMS)
        self.assertTrue(result.fallback_needed)
        self.assertIn("no_command_or_query", result.errors)

    def test_metrics_and_logging(self):
        test_logger = logging.getLogger("tests.command_parser")
        parser = CommandParser(logger_override=test_logger)

        with self.assertLogs(test_logger, level="INFO") as logs:
            parser.parse('{"command": {"room": "Kitchen", "command": "turn_on"}}', ROOMS)
            parser.parse("garbage\nwith newline", ROOMS)

        self.assertEqual(parser.metrics.total_outputs, 2)
        self.assertEqual(parser.metrics.fallback_outputs, 1)
        self.assertEqual(parser.metrics.fallback_ratio, 0.5)
        self.assertNotIn("\n", logs.output[1].split("raw=", 1)[1])


class TestUnifiedPrompt(unittest.TestCase):
    """Prompt construction."""

    def test_prompt_contains_context(self):
        prompt = build_unified_prompt('Turn on "the" lights', ["Kitchen"], "en", DEMO_DEVICES[:2])
        self.assertIn("COMMAND TO PROCESS: \"Turn on 'the' lights\" (Language: en)", prompt)
        self.assertIn("name: Kitchen", prompt)
        self.assertIn("Available devices (showing 2 of 2):", prompt)
        self.assertIn("  - Ceiling Light (light)", prompt)

    def test_prompt_without_rooms_or_devices(self):
        prompt = build_unified_prompt("Turn on the lights", [], "xx")
        self.assertIn("No specific rooms available - use generic room names.", prompt)
        self.assertIn("No devices available.", prompt)
        self.assertIn("(Language: unknown)", prompt)

    def test_device_context_truncated(self):
        prompt = build_unified_prompt("status", ["Kitchen"], "en", DEMO_DEVICES, max_devices=1)
        self.assertIn(f"showing 1 of {len(DEMO_DEVICES)}", prompt)
        self.assertNotIn("Floor Lamp", prompt)


class TestPromptRegressionCases(unittest.TestCase):
    """Ensure prompt regression cases cover required tags."""

    def test_cases_cover_required_tags(self):
        required = {"single", "multi", "typo", "cross_language", "definite_article"}
        tags: set[str] = set()
        for case in PROMPT_REGRESSION_CASES:
            tags.update(case.get("tags", []))

        self.assertTrue(required.issubset(tags))

    def test_expected_rooms_are_known(self):
        for case in PROMPT_REGRESSION_CASES:
            expected = case["expected"]
            self.assertIsInstance(expected, list)
            for item in expected:
                self.assertIn("command", item)
                self.assertIn(item["room"], case["rooms"])


if __name__ == "__main__":
    unittest.main()
