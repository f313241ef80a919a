#!/usr/bin/env python3
"""
Demonstration of Chibi Izumi Bridge.

This demo shows:
1. Exposing functions, object methods and attributes
2. Global and per-binding injections
3. Filters guarding invocations
4. Argument conversion from loosely-typed values
5. Discovery bindings with signature strings
"""

import logging
from dataclasses import dataclass

from izumi.bridge import Binding, BindingRegistry, Injections, ResolutionError, auto_inject_filter


@dataclass
class Session:
    """Request-scoped session supplied by the transport layer."""

    user: str
    admin: bool = False


@dataclass
class Config:
    """Application configuration."""

    app_name: str


@dataclass
class Item:
    name: str
    price: float


class Shop:
    """A small service exposing its methods."""

    def __init__(self):
        self.items: list[Item] = []
        self.currency = "EUR"

    def add(self, item: Item) -> int:
        self.items.append(item)
        return len(self.items)

    def total(self) -> float:
        return sum(i.price for i in self.items)

    def whoami(self, session: Session, config: Config) -> str:
        return f"{session.user}@{config.app_name}"

    def clear(self, logger: logging.Logger) -> None:
        logger.info("Clearing %d items", len(self.items))
        self.items.clear()


def greet(name: str, times: int) -> str:
    """A free function."""
    return " ".join([f"Hello {name}!"] * times)


def main():
    """Main demo function."""
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")
    print("=== Chibi Izumi Bridge Demo ===\n")

    registry = BindingRegistry()
    shop = Shop()

    print("1. Exposing behaviour:")
    print("-" * 30)
    registry.expose_function(greet, "Greeter")
    registry.expose_interface(shop)
    registry.expose_attributes(shop, "^currency$")
    print(f"Interfaces: {registry.interface_names()}")
    print(f"Shop bindings: {registry.binding_names('Shop')}")

    print("\n2. Injections:")
    print("-" * 30)
    registry.setup_global_injection(Config("demo-shop"))
    registry.get("Shop", "whoami").declare_injection(Session)
    alice = Injections.of(Session("alice"))
    print(f"whoami: {registry.invoke_with('Shop', 'whoami', alice)}")

    print("\n3. Conversion of loosely-typed arguments:")
    print("-" * 30)
    print(f"greet: {registry.invoke('Greeter', 'greet', 'world', '2')}")
    registry.invoke("Shop", "add", {"name": "book", "price": "12.5"})
    registry.invoke("Shop", "add", {"name": "pen", "price": 2})
    print(f"total: {registry.invoke('Shop', 'total')} {registry.invoke('Shop', 'currency')}")

    print("\n4. Filters:")
    print("-" * 30)

    def admin_only(session: Session, binding: Binding) -> bool:
        if not session.admin:
            print(f"Denied {binding.name} for {session.user}")
        return session.admin

    registry.get("Shop", "clear").add_filter(auto_inject_filter(admin_only))
    registry.invoke_with("Shop", "clear", alice)
    registry.invoke_with("Shop", "clear", Injections.of(Session("root", admin=True)))
    print(f"total after clear: {registry.invoke('Shop', 'total')}")

    print("\n5. Discovery:")
    print("-" * 30)
    registry.expose_yourself()
    for name, signature in registry.invoke("izumi", "Bindings").items():
        print(f"  {name}({signature})")
    print(f"Revision: {registry.revision}")

    print("\n6. Resolution errors:")
    print("-" * 30)
    for args in [("world",), ("world", "many")]:
        try:
            registry.invoke("Greeter", "greet", *args)
        except ResolutionError as e:
            print(f"Error: {e}")


if __name__ == "__main__":
    main()
