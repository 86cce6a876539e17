"""Tests for the dispatch state machine."""

import pytest

from conftest import make_request
from vk_bot.core import Core
from vk_bot.errors import MissingFieldError, UnknownEventError
from vk_bot.events import Event
from vk_bot.router import command_pattern, is_start_payload


def always(payload):
    return True


def never(payload):
    return False


class TestMessageNew:
    @pytest.mark.asyncio
    async def test_action_wins_over_everything(self, api, recorder):
        dispatcher = (
            Core()
            .on(Event.SERVICE_ACTION, recorder.handler("action"))
            .on(Event.START, recorder.handler("start"))
            .cmd_prefix("/")
            .cmd("test", recorder.handler("cmd"))
            .dyn_payload(always, recorder.handler("dyn"))
            .build()
        )
        request = make_request(
            text="/test",
            payload='{"command":"start"}',
            action={"type": "chat_invite_user", "member_id": -1},
        )
        await dispatcher.dispatch(request, api)
        assert recorder.calls == ["action"]
        assert recorder.contexts[0].event is Event.SERVICE_ACTION

    @pytest.mark.asyncio
    async def test_null_action_still_counts(self, api, recorder):
        dispatcher = (
            Core()
            .on(Event.SERVICE_ACTION, recorder.handler("action"))
            .regex(".", recorder.handler("regex"))
            .build()
        )
        await dispatcher.dispatch(make_request(text="hello", action=None), api)
        assert recorder.calls == ["action"]

    @pytest.mark.asyncio
    async def test_action_without_handler_falls_to_no_match(self, api, recorder):
        dispatcher = (
            Core()
            .on(Event.NO_MATCH, recorder.handler("no_match"))
            .regex(".", recorder.handler("regex"))
            .build()
        )
        await dispatcher.dispatch(make_request(text="hello", action={"type": "x"}), api)
        assert recorder.calls == ["no_match"]

    @pytest.mark.asyncio
    async def test_start_payload_beats_static_payload(self, api, recorder):
        dispatcher = (
            Core()
            .on(Event.START, recorder.handler("start"))
            .payload('{"command":"start"}', recorder.handler("static"))
            .build()
        )
        await dispatcher.dispatch(make_request(payload='{"command":"start"}'), api)
        assert recorder.calls == ["start"]
        assert recorder.contexts[0].event is Event.START

    @pytest.mark.asyncio
    async def test_start_payload_with_spaces(self, api, recorder):
        dispatcher = Core().on(Event.START, recorder.handler("start")).build()
        await dispatcher.dispatch(make_request(payload='{ "command" : "start" }'), api)
        assert recorder.calls == ["start"]

    @pytest.mark.asyncio
    async def test_static_beats_dynamic(self, api, recorder):
        dispatcher = (
            Core()
            .dyn_payload(always, recorder.handler("dyn"))
            .payload('{"a":"b"}', recorder.handler("static"))
            .build()
        )
        await dispatcher.dispatch(make_request(payload='{"a":"b"}'), api)
        assert recorder.calls == ["static"]

    @pytest.mark.asyncio
    async def test_dynamic_payload(self, api, recorder):
        dispatcher = (
            Core()
            .payload('{"a":"b"}', recorder.handler("static"))
            .dyn_payload(always, recorder.handler("dyn"))
            .build()
        )
        await dispatcher.dispatch(make_request(payload='{"other":"x"}'), api)
        assert recorder.calls == ["dyn"]

    @pytest.mark.asyncio
    async def test_dynamic_payload_first_match_in_order(self, api, recorder):
        seen = []

        def tester(name, result):
            def _tester(payload):
                seen.append(name)
                return result
            return _tester

        dispatcher = (
            Core()
            .dyn_payload(tester("first", False), recorder.handler("first"))
            .dyn_payload(tester("second", True), recorder.handler("second"))
            .dyn_payload(tester("third", True), recorder.handler("third"))
            .build()
        )
        await dispatcher.dispatch(make_request(payload='"x"'), api)
        assert recorder.calls == ["second"]
        assert seen == ["first", "second"]

    @pytest.mark.asyncio
    async def test_unmatched_payload_falls_through_to_command(self, api, recorder):
        dispatcher = (
            Core()
            .cmd_prefix("/")
            .cmd("test", recorder.handler("cmd"))
            .dyn_payload(never, recorder.handler("dyn"))
            .build()
        )
        await dispatcher.dispatch(make_request(text="/test", payload='{"b":1}'), api)
        assert recorder.calls == ["cmd"]

    @pytest.mark.asyncio
    async def test_command(self, api, recorder):
        dispatcher = (
            Core()
            .cmd_prefix("/")
            .cmd("test", recorder.handler("cmd"))
            .regex(r"\d", recorder.handler("regex"))
            .on(Event.NO_MATCH, recorder.handler("no_match"))
            .build()
        )
        await dispatcher.dispatch(make_request(text="/test"), api)
        await dispatcher.dispatch(make_request(text="1337"), api)
        await dispatcher.dispatch(make_request(text="words"), api)
        assert recorder.calls == ["cmd", "regex", "no_match"]

    @pytest.mark.asyncio
    async def test_command_beats_regex(self, api, recorder):
        dispatcher = (
            Core()
            .regex("test", recorder.handler("regex"))
            .cmd("test", recorder.handler("cmd"))
            .build()
        )
        await dispatcher.dispatch(make_request(text="test"), api)
        assert recorder.calls == ["cmd"]

    @pytest.mark.asyncio
    async def test_command_requires_prefix(self, api, recorder):
        dispatcher = (
            Core()
            .cmd_prefix("/")
            .cmd("test", recorder.handler("cmd"))
            .on(Event.NO_MATCH, recorder.handler("no_match"))
            .build()
        )
        await dispatcher.dispatch(make_request(text="test"), api)
        await dispatcher.dispatch(make_request(text="say /test"), api)
        assert recorder.calls == ["no_match", "no_match"]

    @pytest.mark.asyncio
    async def test_command_after_mention(self, api, recorder):
        dispatcher = (
            Core()
            .cmd_prefix("/")
            .cmd("test", recorder.handler("cmd"))
            .build(group_id=123)
        )
        await dispatcher.dispatch(make_request(text="[club123|@bot] /test"), api)
        assert recorder.calls == ["cmd"]

    @pytest.mark.asyncio
    async def test_regex_first_match_in_order(self, api, recorder):
        dispatcher = (
            Core()
            .regex("nice", recorder.handler("nice"))
            .regex("ni", recorder.handler("ni"))
            .build()
        )
        await dispatcher.dispatch(make_request(text="very nice"), api)
        assert recorder.calls == ["nice"]

    @pytest.mark.asyncio
    async def test_no_text_no_payload_goes_to_no_match(self, api, recorder):
        dispatcher = (
            Core()
            .regex(".*", recorder.handler("regex"))
            .on(Event.NO_MATCH, recorder.handler("no_match"))
            .build()
        )
        await dispatcher.dispatch(make_request(), api)
        assert recorder.calls == ["no_match"]
        assert recorder.contexts[0].event is Event.NO_MATCH

    @pytest.mark.asyncio
    async def test_no_match_without_handler_is_silent(self, api, recorder):
        dispatcher = Core().build()
        await dispatcher.dispatch(make_request(text="words"), api)
        assert api.sent == []


class TestGenericEvents:
    @pytest.mark.asyncio
    async def test_bound_event(self, api, recorder):
        dispatcher = (
            Core()
            .on(Event.MESSAGE_EDIT, recorder.handler("edit"))
            .on(Event.NO_MATCH, recorder.handler("no_match"))
            .build()
        )
        await dispatcher.dispatch(make_request("message_edit", text="x"), api)
        assert recorder.calls == ["edit"]

    @pytest.mark.asyncio
    async def test_message_reply_without_handler_does_nothing(self, api, recorder):
        dispatcher = Core().on(Event.NO_MATCH, recorder.handler("no_match")).build()
        await dispatcher.dispatch(make_request("message_reply", text="bot said this"), api)
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_message_reply_with_handler(self, api, recorder):
        dispatcher = Core().on(Event.MESSAGE_REPLY, recorder.handler("reply")).build()
        await dispatcher.dispatch(make_request("message_reply"), api)
        assert recorder.calls == ["reply"]

    @pytest.mark.asyncio
    async def test_unbound_event_falls_to_no_match_once(self, api, recorder):
        dispatcher = Core().on(Event.NO_MATCH, recorder.handler("no_match")).build()
        await dispatcher.dispatch(make_request("message_edit", text="x"), api)
        assert recorder.calls == ["no_match"]

    @pytest.mark.asyncio
    async def test_message_allow_uses_user_id(self, api, recorder):
        dispatcher = Core().on(Event.MESSAGE_ALLOW, recorder.handler("allow")).build()
        request = make_request("message_allow", peer_id=None, user_id=55, key="abc")
        await dispatcher.dispatch(request, api)
        assert recorder.contexts[0].peer_id == 55

    @pytest.mark.asyncio
    async def test_typing_state_uses_from_id(self, api, recorder):
        dispatcher = Core().on(Event.MESSAGE_TYPING_STATE, recorder.handler("typing")).build()
        request = make_request("message_typing_state", peer_id=None, from_id=7, to_id=-1, state="typing")
        await dispatcher.dispatch(request, api)
        assert recorder.contexts[0].peer_id == 7


class TestRequestErrors:
    @pytest.mark.asyncio
    async def test_unknown_event(self, api, recorder):
        dispatcher = Core().on(Event.NO_MATCH, recorder.handler("no_match")).build()
        with pytest.raises(UnknownEventError):
            await dispatcher.dispatch(make_request("wall_post_new"), api)
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_missing_peer_id(self, api, recorder):
        dispatcher = Core().on(Event.NO_MATCH, recorder.handler("no_match")).build()
        with pytest.raises(MissingFieldError, match="peer_id"):
            await dispatcher.dispatch(make_request(peer_id=None, text="hi"), api)
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_missing_user_id(self, api):
        dispatcher = Core().build()
        with pytest.raises(MissingFieldError, match="user_id"):
            await dispatcher.dispatch(make_request("message_allow"), api)

    @pytest.mark.asyncio
    async def test_handler_error_propagates(self, api):
        async def boom(ctx):
            raise RuntimeError("boom")

        dispatcher = Core().on(Event.NO_MATCH, boom).build()
        with pytest.raises(RuntimeError):
            await dispatcher.dispatch(make_request(text="x"), api)


class TestMatchers:
    def test_command_pattern_escapes(self):
        pattern = command_pattern("a.b", "+")
        assert pattern.match("+a.b")
        assert not pattern.match("+axb")
        assert not pattern.match("a.b")

    def test_command_pattern_repeats(self):
        assert command_pattern("hi", "/").match("/hi/hi").group(0) == "/hi/hi"

    def test_command_pattern_mention_any_group(self):
        pattern = command_pattern("test", "/")
        assert pattern.match("[club987|bot name] /test")
        assert pattern.match("[club987|@bot]/test")

    def test_command_pattern_mention_exact_group(self):
        pattern = command_pattern("test", "/", group_id=1)
        assert pattern.match("[club1|@bot] /test")
        assert not pattern.match("[club2|@bot] /test")

    def test_command_pattern_user_mention_not_accepted(self):
        assert not command_pattern("test", "/").match("[id1|Someone] /test")

    @pytest.mark.parametrize(
        "payload, expected",
        [
            ('{"command":"start"}', True),
            ('{"command": "start", "extra": 1}', True),
            ('{"command":"stop"}', False),
            ('["command", "start"]', False),
            ('"start"', False),
            ("not json", False),
        ],
    )
    def test_is_start_payload(self, payload, expected):
        assert is_start_payload(payload) is expected
