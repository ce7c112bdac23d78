#!/usr/bin/env python3
"""Unit tests for payload.py - typed accessors over hook payloads."""

from unittest import TestCase, main

from ai_notifier.payload import (
    first_text,
    get_array,
    get_object,
    get_path,
    get_string,
    get_text,
    parse_payload,
)

PAYLOAD = {
    "session_id": "s-1",
    "blank": "   ",
    "count": 3,
    "llm_response": {"candidates": [{"finishReason": "STOP", "content": {"parts": [{"text": "hi"}]}}]},
    "transcript": [{"role": "user"}],
}


class TestGetPath(TestCase):

    def test_nested_dicts_and_lists(self):
        self.assertEqual(get_path(PAYLOAD, "llm_response", "candidates", 0, "finishReason"), "STOP")

    def test_negative_index(self):
        self.assertEqual(get_path(PAYLOAD, "transcript", -1, "role"), "user")

    def test_index_out_of_range(self):
        self.assertIsNone(get_path(PAYLOAD, "llm_response", "candidates", 5))

    def test_wrong_container_type(self):
        self.assertIsNone(get_path(PAYLOAD, "session_id", 0))
        self.assertIsNone(get_path(PAYLOAD, "transcript", "role"))

    def test_non_dict_root(self):
        self.assertIsNone(get_path(None, "a"))
        self.assertIsNone(get_path("text", "a"))


class TestTypedAccessors(TestCase):

    def test_get_string_rejects_non_string(self):
        self.assertIsNone(get_string(PAYLOAD, "count"))
        self.assertEqual(get_string(PAYLOAD, "session_id"), "s-1")

    def test_get_string_keeps_blank(self):
        self.assertEqual(get_string(PAYLOAD, "blank"), "   ")

    def test_get_text_treats_blank_as_absent(self):
        self.assertIsNone(get_text(PAYLOAD, "blank"))

    def test_get_object_and_array(self):
        self.assertIsInstance(get_object(PAYLOAD, "llm_response"), dict)
        self.assertIsNone(get_object(PAYLOAD, "transcript"))
        self.assertEqual(get_array(PAYLOAD, "transcript"), [{"role": "user"}])
        self.assertIsNone(get_array(PAYLOAD, "llm_response"))

    def test_first_text_skips_blank_and_missing(self):
        self.assertEqual(first_text(PAYLOAD, "missing", "blank", "session_id"), "s-1")
        self.assertIsNone(first_text(PAYLOAD, "missing", "blank"))


class TestParsePayload(TestCase):

    def test_object(self):
        self.assertEqual(parse_payload(b'{"hook_event_name": "Stop"}'), {"hook_event_name": "Stop"})

    def test_str_input(self):
        self.assertEqual(parse_payload('  {"a": 1}\n'), {"a": 1})

    def test_empty_is_no_input(self):
        self.assertIsNone(parse_payload(None))
        self.assertIsNone(parse_payload(b""))
        self.assertIsNone(parse_payload(b"  \n"))

    def test_malformed_is_no_input(self):
        self.assertIsNone(parse_payload(b"{not json"))

    def test_non_object_is_no_input(self):
        self.assertIsNone(parse_payload(b"[1, 2]"))
        self.assertIsNone(parse_payload(b'"Stop"'))


if __name__ == "__main__":
    main()
