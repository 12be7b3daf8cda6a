import json

from chat_relay.services.reply_adapters import parse_openai_reply, passthrough_reply


def test_message_content_reply():
    payload = {"choices": [{"message": {"role": "assistant", "content": "hi"}}]}
    reply = parse_openai_reply(payload)
    assert reply.kind == "message"
    assert reply.text == "hi"
    assert reply.raw is payload


def test_legacy_completion_text_reply():
    reply = parse_openai_reply({"choices": [{"text": "legacy"}]})
    assert reply.kind == "text"
    assert reply.text == "legacy"


def test_empty_message_content_is_still_a_message():
    reply = parse_openai_reply({"choices": [{"message": {"content": ""}}]})
    assert reply.kind == "message"
    assert reply.text == ""


def test_unknown_choice_shape_is_unparsed_and_serialized():
    choice = {"message": {"tool_calls": [{"id": "call_1"}]}, "finish_reason": "tool_calls"}
    reply = parse_openai_reply({"choices": [choice]})
    assert reply.kind == "unparsed"
    assert json.loads(reply.text) == choice


def test_top_level_output_reply():
    reply = parse_openai_reply({"output": "from output"})
    assert reply.kind == "output"
    assert reply.text == "from output"


def test_structured_output_is_serialized():
    reply = parse_openai_reply({"output": [{"type": "message"}]})
    assert reply.kind == "output"
    assert json.loads(reply.text) == [{"type": "message"}]


def test_unknown_payload_is_unparsed():
    payload = {"error": {"message": "nope"}}
    reply = parse_openai_reply(payload)
    assert reply.kind == "unparsed"
    assert json.loads(reply.text) == payload


def test_non_dict_payload_is_unparsed():
    reply = parse_openai_reply(["a", "b"])
    assert reply.kind == "unparsed"
    assert reply.raw == ["a", "b"]


def test_passthrough_reply_keeps_payload_untouched():
    payload = {"answer": "42"}
    reply = passthrough_reply(payload)
    assert reply.is_passthrough
    assert reply.text is None
    assert reply.raw is payload
