import asyncio
import unittest

from weather_dashboard.dashboard.timers import RepeatingTimer


class TestRepeatingTimer(unittest.IsolatedAsyncioTestCase):
    async def test_fires_repeatedly_until_cancelled(self):
        fired = []
        timer = RepeatingTimer(0.02, lambda: fired.append(1), name="test").start()

        await asyncio.sleep(0.11)
        timer.cancel()
        count = len(fired)
        await asyncio.sleep(0.06)

        self.assertGreaterEqual(count, 2)
        self.assertEqual(len(fired), count)
        self.assertEqual(timer.ticks, count)
        self.assertFalse(timer.active)

    async def test_start_twice_is_noop(self):
        fired = []
        timer = RepeatingTimer(0.05, lambda: fired.append(1))
        timer.start()
        timer.start()

        await asyncio.sleep(0.075)
        timer.cancel()

        self.assertEqual(len(fired), 1)

    async def test_failing_callback_keeps_timer_alive(self):
        calls = []

        def flaky():
            calls.append(1)
            raise RuntimeError("boom")

        timer = RepeatingTimer(0.02, flaky).start()
        await asyncio.sleep(0.07)
        timer.cancel()

        self.assertGreaterEqual(len(calls), 2)

    async def test_cancelled_timer_cannot_restart(self):
        timer = RepeatingTimer(1.0, lambda: None).start()
        timer.cancel()
        timer.cancel()
        with self.assertRaises(RuntimeError):
            timer.start()

    def test_rejects_non_positive_interval(self):
        with self.assertRaises(ValueError):
            RepeatingTimer(0, lambda: None)


if __name__ == "__main__":
    unittest.main()
