import unittest

from prizedraw.clock import VirtualClock


class VirtualClockTests(unittest.TestCase):
    def test_advance_fires_due_callbacks_in_order(self) -> None:
        clock = VirtualClock()
        fired = []
        clock.call_later(2.0, fired.append, "b")
        clock.call_later(1.0, fired.append, "a")
        clock.call_later(2.0, fired.append, "c")
        clock.call_later(5.0, fired.append, "late")

        count = clock.advance(3.0)

        self.assertEqual(fired, ["a", "b", "c"])
        self.assertEqual(count, 3)
        self.assertEqual(clock.time(), 3.0)
        self.assertEqual(clock.pending(), 1)

    def test_callbacks_see_their_own_due_time(self) -> None:
        clock = VirtualClock()
        seen = []
        clock.call_later(1.5, lambda: seen.append(clock.time()))
        clock.advance(4.0)
        self.assertEqual(seen, [1.5])

    def test_chained_callbacks_within_window_fire(self) -> None:
        clock = VirtualClock()
        fired = []

        def first() -> None:
            fired.append("first")
            clock.call_later(1.0, fired.append, "second")

        clock.call_later(1.0, first)
        clock.advance(2.0)
        self.assertEqual(fired, ["first", "second"])

    def test_cancelled_handles_do_not_fire(self) -> None:
        clock = VirtualClock()
        fired = []
        handle = clock.call_later(1.0, fired.append, "x")
        handle.cancel()

        self.assertTrue(handle.cancelled())
        self.assertEqual(clock.pending(), 0)
        clock.run_until_idle()
        self.assertEqual(fired, [])

    def test_run_until_idle_guards_against_endless_chains(self) -> None:
        clock = VirtualClock()

        def forever() -> None:
            clock.call_later(1.0, forever)

        clock.call_later(1.0, forever)
        with self.assertRaises(RuntimeError):
            clock.run_until_idle(max_callbacks=50)


if __name__ == "__main__":
    unittest.main()
