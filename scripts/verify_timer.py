import asyncio
import os
import sys
import unittest

# Ensure project root is in path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(project_root)

from packages.aia_session.timer import CountdownTimer


class Countdown:
    """Minimal tick/expire pair driving a CountdownTimer."""
    def __init__(self, remaining: int):
        self.remaining = remaining
        self.ticks = []
        self.expired = []
        self.detach = False

    async def on_tick(self, question_id):
        if self.detach:
            return None
        self.remaining -= 1
        self.ticks.append((question_id, self.remaining))
        return self.remaining

    async def on_expire(self, question_id):
        self.expired.append(question_id)


class TestCountdownTimer(unittest.IsolatedAsyncioTestCase):
    async def test_counts_down_and_expires_once(self):
        countdown = Countdown(3)
        timer = CountdownTimer(countdown.on_tick, countdown.on_expire, interval=0.001)

        timer.start(1)
        self.assertTrue(timer.running)
        self.assertEqual(timer.question_id, 1)

        await asyncio.sleep(0.05)

        self.assertEqual(countdown.ticks, [(1, 2), (1, 1), (1, 0)])
        self.assertEqual(countdown.expired, [1])
        self.assertFalse(timer.running)
        self.assertIsNone(timer.question_id)

    async def test_stop_cancels_without_expiry(self):
        countdown = Countdown(100)
        timer = CountdownTimer(countdown.on_tick, countdown.on_expire, interval=0.001)

        timer.start(2)
        await asyncio.sleep(0.01)
        timer.stop()
        ticked = len(countdown.ticks)
        await asyncio.sleep(0.01)

        self.assertEqual(len(countdown.ticks), ticked)
        self.assertEqual(countdown.expired, [])
        self.assertFalse(timer.running)

    async def test_restart_replaces_previous_countdown(self):
        countdown = Countdown(100)
        timer = CountdownTimer(countdown.on_tick, countdown.on_expire, interval=0.001)

        timer.start(1)
        await asyncio.sleep(0.005)
        before_restart = len(countdown.ticks)
        timer.start(2)
        await asyncio.sleep(0.02)
        timer.stop()

        seen_after_restart = [qid for qid, _ in countdown.ticks[before_restart:]]
        self.assertTrue(seen_after_restart)
        self.assertTrue(all(qid == 2 for qid in seen_after_restart))
        self.assertEqual(countdown.expired, [])

    async def test_tick_handler_can_detach(self):
        countdown = Countdown(100)
        countdown.detach = True
        timer = CountdownTimer(countdown.on_tick, countdown.on_expire, interval=0.001)

        timer.start(4)
        await asyncio.sleep(0.01)

        self.assertFalse(timer.running)
        self.assertEqual(countdown.ticks, [])
        self.assertEqual(countdown.expired, [])

    async def test_expire_handler_may_restart_timer(self):
        """The expiry callback runs detached, so it can arm the next question."""
        countdown = Countdown(1)
        timer = CountdownTimer(countdown.on_tick, None, interval=0.001)

        async def on_expire(question_id):
            countdown.expired.append(question_id)
            if question_id == 1:
                countdown.remaining = 2
                timer.start(2)
        timer.on_expire = on_expire

        timer.start(1)
        await asyncio.sleep(0.05)

        self.assertEqual(countdown.expired, [1, 2])
        self.assertEqual(countdown.ticks, [(1, 0), (2, 1), (2, 0)])

    async def test_expire_errors_are_logged_not_raised(self):
        countdown = Countdown(1)

        async def broken(question_id):
            raise RuntimeError("scorer down")

        timer = CountdownTimer(countdown.on_tick, broken, interval=0.001)
        timer.start(1)
        await asyncio.sleep(0.02)
        self.assertFalse(timer.running)

    def test_interval_must_be_positive(self):
        with self.assertRaises(ValueError):
            CountdownTimer(None, None, interval=0)


if __name__ == '__main__':
    unittest.main()
