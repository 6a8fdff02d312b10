"""
SubscriptProxy Examples

Demonstrates inserting interception layers into an object's
inheritance chain in a few common scenarios.
"""

import json
from datetime import datetime, UTC

from subscriptproxy import SubscriptProxy


class Person:
    """Target with own attributes and a method reading them."""

    greeting = "Hello"

    def __init__(self, name: str, age: int):
        self.name = name
        self.age = age

    def greet(self) -> str:
        return f"{self.greeting}, my name is {self.name} and I'm {self.age} years old."


class Counter:
    """Target whose state changes between reads."""

    def __init__(self):
        self.count = 0

    def increment(self) -> int:
        self.count += 1
        return self.count


class Config:
    """Target used with a wildcard handler."""

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port


class App:
    """Target reading values supplied by a live mapping."""

    def __init__(self, name: str):
        self.name = name

    def start(self) -> str:
        return f"Starting {self.name} in {self.NODE_ENV} mode on port {self.PORT}"


class User:
    """Target used to demonstrate layer options."""

    def __init__(self, username: str, password: str, email: str):
        self.username = username
        self.password = password
        self.email = email


def basic_example():
    """Add attributes and shadow class attributes."""
    print("=== Basic Property Override Example ===")

    person = Person("John", 30)
    print("Original:", person.greet())

    SubscriptProxy.apply_to(person, {
        "greeting": "Hi",
        "occupation": "Engineer",
    })

    # Own attributes still win; class attributes are shadowed
    print("Modified:", person.greet())
    print("New attribute:", person.occupation)
    print("Own attributes:", vars(person))


def dynamic_properties_example():
    """Compute values on every read."""
    print("\n=== Dynamic Properties Example ===")

    counter = Counter()

    SubscriptProxy.apply_to(counter, {
        "current_time": lambda: datetime.now(UTC).isoformat(),
        "squared": lambda prototype, key, receiver: receiver.count * receiver.count,
    })

    counter.increment()
    counter.increment()

    print("Count:", counter.count)
    print("Squared:", counter.squared)
    print("Current time:", counter.current_time)

    counter.increment()
    print("Count after increment:", counter.count)
    print("Squared after increment:", counter.squared)


def wildcard_example():
    """Answer any attribute not explicitly mapped."""
    print("\n=== Wildcard Handler Example ===")

    config = Config("localhost", 8080)

    def getters(prototype, key, receiver):
        if key.startswith("get_"):
            actual = key[4:].lower()
            if actual in vars(receiver):
                return getattr(receiver, actual)

        print(f"Attempted to access unknown attribute: {key}")
        return f"Attribute '{key}' not found"

    SubscriptProxy.apply_to(config, getters)

    print("get_host:", config.get_host)
    print("get_port:", config.get_port)
    print("get_nonexistent:", config.get_nonexistent)


def iterables_example():
    """Read values from a mapping view that keeps changing."""
    print("\n=== Iterables Example ===")

    environment = {
        "NODE_ENV": "development",
        "DEBUG": "true",
        "PORT": "3000",
    }

    app = App("Example App")
    SubscriptProxy.apply_to(app, environment.items())

    print("Environment:", app.NODE_ENV)
    print("Debug enabled:", app.DEBUG)
    print(app.start())

    environment["PORT"] = "4000"
    print(app.start())


def configuration_options_example():
    """Exclude keys from a layer."""
    print("\n=== Configuration Options Example ===")

    user = User("admin", "secret", "admin@example.com")

    def as_json(prototype, key, receiver):
        data = {k: v for k, v in vars(receiver).items() if k != "password"}
        data["display_name"] = receiver.display_name
        return json.dumps(data, indent=2)

    layer = SubscriptProxy.apply_to(user, {
        "display_name": "Administrator",
        "role": "admin",
        "to_json": as_json,
    }, {
        "except": ["role"],
        "evaluate_functions": True,
        "fallback": True,
        "copy_parent_prototype": True,
    })

    print("Display name:", user.display_name)
    print("Role claimed:", layer.has("role"))
    print("JSON representation:", user.to_json)


def run_all_examples():
    """Run every example in order."""
    basic_example()
    dynamic_properties_example()
    wildcard_example()
    iterables_example()
    configuration_options_example()


if __name__ == "__main__":
    run_all_examples()
