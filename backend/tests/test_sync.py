import asyncio
import unittest
from datetime import timedelta

from helpers import BASE_TIME, DatabaseTestCase
from app.core.config import settings
from app.core.utils import utcnow
from app.models.message import Message
from app.services import messaging
from app.services.sync import get_sync_snapshot
from app.sync.poller import MAX_POLL_INTERVAL, MIN_POLL_INTERVAL, PollingSync

class SyncSnapshotTest(DatabaseTestCase):
    """Instantánea de sincronización por polling"""

    def test_01_first_sync_is_always_changed(self):
        result = get_sync_snapshot(self.db, self.shop_actor)

        self.assertTrue(result.success)
        self.assertTrue(result.data.changed)
        self.assertEqual(15, result.data.poll_interval_seconds)
        self.assertEqual(0, result.data.unread_messages)

    def test_02_counts_and_conversations(self):
        messaging.send_message(self.db, self.buyer_actor, self.shop.id, "hola")
        messaging.send_message(self.db, self.buyer_actor, self.shop.id, "¿sigue disponible?")

        snapshot = get_sync_snapshot(self.db, self.shop_actor).data

        self.assertEqual(2, snapshot.unread_messages)
        self.assertEqual(2, snapshot.unread_notifications)
        self.assertEqual(1, len(snapshot.conversations))
        self.assertEqual(2, snapshot.conversations[0].unread_count)

    def test_03_no_changes_since_cursor(self):
        self.add_message(self.buyer.id, self.shop.id, "user", "hola")
        cursor = get_sync_snapshot(self.db, self.shop_actor).data.server_time

        again = get_sync_snapshot(self.db, self.shop_actor, since=cursor).data

        self.assertFalse(again.changed)
        self.assertEqual([], again.conversations)
        # Los contadores se envían siempre
        self.assertEqual(1, again.unread_messages)

    def test_04_new_message_after_cursor_is_a_change(self):
        cursor = get_sync_snapshot(self.db, self.shop_actor).data.server_time

        messaging.send_message(self.db, self.buyer_actor, self.shop.id, "nuevo")

        self.assertTrue(get_sync_snapshot(self.db, self.shop_actor, since=cursor).data.changed)

    def test_05_read_receipt_is_a_change_for_the_sender(self):
        messaging.send_message(self.db, self.buyer_actor, self.shop.id, "hola")
        cursor = get_sync_snapshot(self.db, self.buyer_actor).data.server_time

        messaging.mark_as_read(self.db, self.shop_actor, self.buyer.id)

        self.assertTrue(get_sync_snapshot(self.db, self.buyer_actor, since=cursor).data.changed)

    def test_06_empty_account_is_unchanged(self):
        since = utcnow() - timedelta(days=1)

        self.assertFalse(get_sync_snapshot(self.db, self.buyer_actor, since=since).data.changed)

    def test_07_naive_cursor_is_treated_as_utc(self):
        messaging.send_message(self.db, self.buyer_actor, self.shop.id, "hola")
        naive_future = (utcnow() + timedelta(minutes=5)).replace(tzinfo=None)

        self.assertFalse(get_sync_snapshot(self.db, self.shop_actor, since=naive_future).data.changed)

    def test_08_requires_identity(self):
        result = get_sync_snapshot(self.db, None)

        self.assertFalse(result.success)
        self.assertEqual("unauthenticated", result.code)

    def test_09_late_commit_before_cursor_is_picked_up(self):
        """Un mensaje con fecha anterior al cursor pero confirmado después aparece en el siguiente polling"""
        cursor = get_sync_snapshot(self.db, self.shop_actor).data.server_time
        late = Message(
            user_id=self.buyer.id,
            seller_id=self.shop.id,
            sender_type="user",
            body="llegó tarde",
            created_at=cursor - timedelta(milliseconds=5),
        )
        self.db.add(late)
        self.db.commit()

        snapshot = get_sync_snapshot(self.db, self.shop_actor, since=cursor).data

        self.assertTrue(snapshot.changed)
        self.assertEqual(1, len(snapshot.conversations))
        self.assertEqual("llegó tarde", snapshot.conversations[0].last_message)

    def test_10_activity_older_than_one_interval_is_not_a_change(self):
        self.add_message(self.buyer.id, self.shop.id, "user", "hola")
        since = BASE_TIME + timedelta(seconds=settings.POLL_INTERVAL_SECONDS + 1)

        self.assertFalse(get_sync_snapshot(self.db, self.shop_actor, since=since).data.changed)

        since = BASE_TIME + timedelta(seconds=settings.POLL_INTERVAL_SECONDS - 1)

        self.assertTrue(get_sync_snapshot(self.db, self.shop_actor, since=since).data.changed)

class PollingSyncTest(unittest.TestCase):
    """Bucle de polling del cliente"""

    def make_poller(self, ticks, visible=True, refresh=None):
        self.calls = []
        self.sleeps = []

        async def default_refresh():
            self.calls.append(len(self.sleeps))

        async def fake_sleep(seconds):
            self.sleeps.append(seconds)
            if len(self.sleeps) >= ticks:
                poller.request_stop()
            await asyncio.sleep(0)

        poller = PollingSync(refresh or default_refresh, interval=10, visible=visible, sleep=fake_sleep)
        return poller

    def test_01_refreshes_on_start_and_every_tick(self):
        poller = self.make_poller(ticks=3)

        asyncio.run(poller.run())

        # Refresco inicial y uno por tick antes de la parada
        self.assertEqual([0, 1, 2], self.calls)
        self.assertEqual([10, 10, 10], self.sleeps)

    def test_02_hidden_view_does_not_poll(self):
        poller = self.make_poller(ticks=4, visible=False)

        asyncio.run(poller.run())

        self.assertEqual([], self.calls)
        self.assertEqual(4, len(self.sleeps))

    def test_03_regaining_visibility_refreshes_immediately(self):
        poller = self.make_poller(ticks=1, visible=False)

        async def scenario():
            poller.set_visible(True)
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            refreshed_before_tick = list(self.calls)
            await poller.stop()
            return refreshed_before_tick

        refreshed = asyncio.run(scenario())

        self.assertEqual([0], refreshed)
        self.assertEqual([], self.sleeps)

    def test_04_hiding_does_not_refresh(self):
        poller = self.make_poller(ticks=1)

        async def scenario():
            poller.set_visible(False)
            await asyncio.sleep(0)

        asyncio.run(scenario())

        self.assertEqual([], self.calls)

    def test_05_failures_do_not_stop_the_loop(self):
        attempts = []

        async def flaky():
            attempts.append(1)
            raise RuntimeError("servidor no disponible")

        poller = self.make_poller(ticks=2, refresh=flaky)

        asyncio.run(poller.run())

        # Refresco inicial y el del primer tick; el segundo tick detiene el bucle
        self.assertEqual(2, len(attempts))
        self.assertEqual(2, poller.failure_count)
        self.assertEqual(0, poller.refresh_count)

    def test_06_sync_refresh_callable_runs_in_thread(self):
        seen = []
        poller = self.make_poller(ticks=2, refresh=lambda: seen.append("ok") or {"success": True})

        asyncio.run(poller.run())

        self.assertEqual(["ok", "ok"], seen)
        self.assertEqual(2, poller.refresh_count)

    def test_07_interval_is_clamped(self):
        poller = PollingSync(lambda: None, interval=1)
        self.assertEqual(MIN_POLL_INTERVAL, poller.interval)

        poller.update_interval(3600)
        self.assertEqual(MAX_POLL_INTERVAL, poller.interval)

    def test_08_start_and_stop(self):
        async def scenario():
            calls = []

            async def refresh():
                calls.append(1)

            poller = PollingSync(refresh, interval=30)
            task = poller.start()
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            await poller.stop()
            return calls, task

        calls, task = asyncio.run(scenario())

        self.assertEqual([1], calls)
        self.assertTrue(task.done())

if __name__ == "__main__":
    unittest.main()
