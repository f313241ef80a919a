#!/usr/bin/env python3
"""
Unit tests for binding filters.
"""

import unittest
from dataclasses import dataclass

from izumi.bridge import Binding, BindingRegistry, Injections, auto_inject_filter


@dataclass
class Context:
    val: str


@dataclass
class Session:
    user: str


class TestFilterChain(unittest.TestCase):
    """Test filter chain evaluation."""

    def setUp(self):
        self.registry = BindingRegistry()
        self.calls: list[str] = []

        def target(a: int) -> int:
            self.calls.append("target")
            return a * 2

        self.binding = self.registry.expose_function(target, "S", "target")[0]

    def _filter(self, name: str, result: bool):
        def f(binding: Binding, injections: Injections) -> bool:
            self.calls.append(name)
            return result

        return f

    def test_all_filters_pass(self):
        """Test that the call proceeds when every filter accepts."""
        self.binding.add_filter(self._filter("f1", True)).add_filter(self._filter("f2", True))

        self.assertEqual(self.binding.invoke(21), 42)
        self.assertEqual(self.calls, ["f1", "f2", "target"])

    def test_rejection_short_circuits(self):
        """Test that a rejecting filter stops both the chain and the call."""
        self.binding.add_filter(self._filter("f1", True))
        self.binding.add_filter(self._filter("f2", False))
        self.binding.add_filter(self._filter("f3", True))

        self.assertIsNone(self.binding.invoke(21))
        self.assertEqual(self.calls, ["f1", "f2"])

    def test_rejected_call_does_not_check_arguments(self):
        """Test that filters run before the argument vector is assembled."""
        self.binding.add_filter(self._filter("deny", False))

        self.assertIsNone(self.binding.invoke())
        self.assertEqual(self.calls, ["deny"])

    def test_filter_receives_binding(self):
        """Test that filters see the binding being invoked."""
        seen: list[str] = []

        def record(binding: Binding, injections: Injections) -> bool:
            seen.append(binding.name)
            return True

        self.binding.add_filter(record)
        self.binding.invoke(1)

        self.assertEqual(seen, ["S.target"])

    def test_filters_share_injections(self):
        """Test that all filters of one call see the same, mutable injection set."""
        sets: list[Injections] = []

        def add_context(binding: Binding, injections: Injections) -> bool:
            sets.append(injections)
            injections.add(Context("from filter"))
            return True

        def check_context(binding: Binding, injections: Injections) -> bool:
            sets.append(injections)
            return injections.find(Context) is not None

        self.binding.add_filter(add_context).add_filter(check_context)
        self.binding.invoke(1)

        self.assertEqual(len(sets), 2)
        self.assertIs(sets[0], sets[1])

    def test_filter_supplies_injection_for_call(self):
        """Test that a value added by a filter is injected into the call."""

        def describe(ctx: Context, n: int) -> str:
            return f"{ctx.val}/{n}"

        binding = self.registry.expose_function(describe, "S", "describe")[0].declare_injection(Context)

        def provide(binding: Binding, injections: Injections) -> bool:
            injections.add(Context("provided"))
            return True

        binding.add_filter(provide)

        self.assertEqual(binding.invoke(7), "provided/7")

    def test_runtime_injections_are_not_modified(self):
        """Test that filters mutate a per-call copy, not the caller's injections."""
        runtime = Injections.of(Session("alice"))

        def add_context(binding: Binding, injections: Injections) -> bool:
            injections.add(Context("x"))
            return True

        self.binding.add_filter(add_context)
        self.binding.invoke_with(runtime, 1)

        self.assertNotIn(Context, runtime)

    def test_clear_filters(self):
        """Test that clearing removes all filters of a binding."""
        self.binding.add_filter(self._filter("deny", False))
        self.assertEqual(len(self.binding.filters), 1)

        self.binding.clear_filters()

        self.assertEqual(len(self.binding.filters), 0)
        self.assertEqual(self.binding.invoke(2), 4)

    def test_filters_on_many_bindings(self):
        """Test adding a filter to a list of bindings."""
        self.registry.expose_function(lambda: "other", "S", "other")
        self.registry.bindings().add_filter(self._filter("deny", False))

        self.assertIsNone(self.registry.invoke("S", "target", 1))
        self.assertIsNone(self.registry.invoke("S", "other"))
        self.assertEqual(self.calls, ["deny", "deny"])


class TestAutoInjectFilter(unittest.TestCase):
    """Test filters whose parameters are resolved from the injections."""

    def setUp(self):
        self.registry = BindingRegistry()
        self.binding = self.registry.expose_function(lambda x: x, "S", "echo")[0]

    def test_parameters_resolved_by_type(self):
        """Test that filter parameters are taken from the call's injections."""
        seen: list[tuple[str, str]] = []

        def check(session: Session, binding: Binding) -> bool:
            seen.append((session.user, binding.name))
            return session.user == "admin"

        self.binding.add_filter(auto_inject_filter(check))

        self.assertEqual(self.binding.invoke_with(Injections.of(Session("admin")), "hi"), "hi")
        self.assertIsNone(self.binding.invoke_with(Injections.of(Session("guest")), "hi"))
        self.assertEqual(seen, [("admin", "S.echo"), ("guest", "S.echo")])

    def test_singletons_are_available(self):
        """Test that the binding's singletons can be requested by a filter."""

        def check(ctx: Context) -> bool:
            return ctx.val == "ok"

        self.binding.singletons.add(Context("ok"))
        self.binding.add_filter(auto_inject_filter(check))

        self.assertEqual(self.binding.invoke(1), 1)

    def test_injections_container_is_available(self):
        """Test that a filter can request the injection set itself and extend it."""

        def enrich(injections: Injections) -> bool:
            injections.add(Context("enriched"))
            return True

        def verify(ctx: Context) -> bool:
            return ctx.val == "enriched"

        self.binding.add_filter(auto_inject_filter(enrich)).add_filter(auto_inject_filter(verify))

        self.assertEqual(self.binding.invoke("through"), "through")

    def test_default_used_when_missing(self):
        """Test that parameter defaults apply when no injection matches."""

        def check(session: Session | None = None) -> bool:
            return session is None

        self.binding.add_filter(auto_inject_filter(check))

        self.assertEqual(self.binding.invoke(5), 5)

    def test_keyword_only_parameters(self):
        """Test that keyword-only filter parameters are resolved as well."""

        def check(binding: Binding, *, session: Session) -> bool:
            return session.user == "admin"

        self.binding.add_filter(auto_inject_filter(check))

        self.assertEqual(self.binding.invoke_with(Injections.of(Session("admin")), 1), 1)
        self.assertIsNone(self.binding.invoke_with(Injections.of(Session("guest")), 1))

    def test_missing_injection_rejects(self):
        """Test that an unresolvable parameter stops the call with a warning."""

        def check(session: Session) -> bool:
            return True

        self.binding.add_filter(auto_inject_filter(check))

        with self.assertLogs("izumi.bridge.filters", "WARNING") as logs:
            self.assertIsNone(self.binding.invoke(5))
        self.assertIn("Session", logs.output[0])

    def test_non_bool_filter_rejected(self):
        """Test that only functions annotated to return bool are accepted."""

        def not_a_filter(session: Session) -> str:
            return "x"

        def unannotated(session: Session):
            return True

        with self.assertRaises(TypeError):
            auto_inject_filter(not_a_filter)
        with self.assertRaises(TypeError):
            auto_inject_filter(unannotated)
        with self.assertRaises(TypeError):
            auto_inject_filter("not callable")


if __name__ == "__main__":
    unittest.main()
