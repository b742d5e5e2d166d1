import asyncio
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from board_maintainer.core.activity import (
    CARD_ACTION_FILTER,
    is_qualifying_action,
    latest_qualifying_timestamp,
    resolve_last_activity,
)
from board_maintainer.models.trello import EPOCH, Action, Card


T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _action(kind, card_id, when, **data):
    payload = {"card": {"id": card_id}}
    payload.update(data)
    return Action.model_validate({"id": f"a-{kind}-{when.isoformat()}", "type": kind, "date": when.isoformat(), "data": payload})


def _card(card_id="c1", last_activity=None):
    raw = {"id": card_id, "name": f"Card {card_id}", "idList": "L1"}
    if last_activity is not None:
        raw["dateLastActivity"] = last_activity.isoformat()
    return Card.model_validate(raw)


def _client(card_actions=None, list_actions=None):
    client = AsyncMock()
    client.get_card_actions = AsyncMock(return_value=card_actions or [])
    client.get_list_actions = AsyncMock(return_value=list_actions or [])
    return client


class TestQualifyingActions(unittest.TestCase):
    def test_creation_membership_comment_qualify(self):
        for kind in ("createCard", "copyCard", "addMemberToCard", "removeMemberFromCard", "commentCard"):
            self.assertTrue(is_qualifying_action(_action(kind, "c1", T0)), kind)

    def test_list_move_qualifies_but_other_updates_do_not(self):
        move = _action("updateCard", "c1", T0, listBefore={"id": "L1"}, listAfter={"id": "L2"})
        pos_change = _action("updateCard", "c1", T0, old={"pos": 1024})
        desc_edit = _action("updateCard", "c1", T0, old={"desc": "before"})
        self.assertTrue(is_qualifying_action(move))
        self.assertFalse(is_qualifying_action(pos_change))
        self.assertFalse(is_qualifying_action(desc_edit))

    def test_unrelated_kinds_do_not_qualify(self):
        self.assertFalse(is_qualifying_action(_action("addAttachmentToCard", "c1", T0)))
        self.assertFalse(is_qualifying_action(_action("updateCheckItemStateOnCard", "c1", T0)))

    def test_latest_ignores_other_cards(self):
        actions = [
            _action("commentCard", "c1", T0),
            _action("commentCard", "other", T0 + timedelta(days=5)),
            _action("createCard", "c1", T0 - timedelta(days=10)),
        ]
        self.assertEqual(latest_qualifying_timestamp("c1", actions), T0)

    def test_card_filter_requests_update_actions(self):
        self.assertIn("updateCard", CARD_ACTION_FILTER.split(","))
        self.assertIn("commentCard", CARD_ACTION_FILTER.split(","))


class TestResolveLastActivity(unittest.TestCase):
    def test_uses_max_qualifying_card_action(self):
        async def run():
            actions = [
                _action("createCard", "c1", T0 - timedelta(days=30)),
                _action("commentCard", "c1", T0 - timedelta(days=2)),
                _action("updateCard", "c1", T0, old={"pos": 5}),
                _action("updateCard", "c1", T0 - timedelta(days=1), old={"desc": "x"}),
            ]
            client = _client(card_actions=actions)

            resolved = await resolve_last_activity(client, _card(last_activity=T0), "L1")

            self.assertEqual(resolved, T0 - timedelta(days=2))
            client.get_list_actions.assert_not_awaited()
            kwargs = client.get_card_actions.await_args.kwargs
            self.assertEqual(kwargs.get("action_filter"), CARD_ACTION_FILTER)

        asyncio.run(run())

    def test_falls_back_to_list_creation_actions(self):
        async def run():
            list_actions = [
                _action("createCard", "someone-else", T0),
                _action("createCard", "c1", T0 - timedelta(days=20)),
            ]
            client = _client(card_actions=[], list_actions=list_actions)

            resolved = await resolve_last_activity(client, _card(last_activity=T0), "L1")

            self.assertEqual(resolved, T0 - timedelta(days=20))
            client.get_list_actions.assert_awaited_once_with("L1", "createCard")

        asyncio.run(run())

    def test_uses_card_list_when_no_list_given(self):
        async def run():
            client = _client()
            await resolve_last_activity(client, _card(), None)
            client.get_list_actions.assert_awaited_once_with("L1", "createCard")

        asyncio.run(run())

    def test_no_actions_falls_back_to_board_activity(self):
        async def run():
            client = _client()
            reported = T0 - timedelta(hours=7)
            resolved = await resolve_last_activity(client, _card(last_activity=reported), "L1")
            self.assertEqual(resolved, reported)

        asyncio.run(run())

    def test_only_non_qualifying_actions_falls_back_to_board_activity(self):
        async def run():
            client = _client(card_actions=[_action("updateCard", "c1", T0, old={"pos": 1})])
            reported = T0 - timedelta(days=3)
            resolved = await resolve_last_activity(client, _card(last_activity=reported), "L1")
            self.assertEqual(resolved, reported)
            client.get_list_actions.assert_not_awaited()

        asyncio.run(run())

    def test_missing_board_activity_is_epoch(self):
        async def run():
            resolved = await resolve_last_activity(_client(), _card(), "L1")
            self.assertEqual(resolved, EPOCH)

        asyncio.run(run())

    def test_fetch_errors_propagate(self):
        async def run():
            from board_maintainer.services.trello import TrelloFetchError

            client = _client()
            client.get_card_actions = AsyncMock(side_effect=TrelloFetchError("API_ERROR: 500"))
            with self.assertRaises(TrelloFetchError):
                await resolve_last_activity(client, _card(), "L1")

        asyncio.run(run())


if __name__ == "__main__":
    unittest.main()
