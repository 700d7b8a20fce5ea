"""
Example 01: Basic Mapping

This example demonstrates mapping row dicts and objects to dataclasses and
Pydantic models, and what happens to values that cannot be converted.
"""

from graph_mapper import Int32, Mapper, configure_logging
from dataclasses import dataclass, field
from pydantic import BaseModel
import datetime as dt


@dataclass
class User:
    """User model using dataclass"""
    id: int
    name: str
    signed_up: dt.date
    active: bool = True
    logins: Int32 = 0
    tags: list[str] = field(default_factory=list)


class UserSummary(BaseModel):
    """Projection using Pydantic"""
    id: int
    name: str
    signed_up: str = ""
    tags: tuple[str, ...] = ()


def main():
    # DEBUG shows skipped members and conversion fallbacks
    configure_logging(level="DEBUG")
    mapper = Mapper()

    print("=== Basic Mapping ===\n")

    # Row dicts are read by key and every value is converted to the field type
    print("1. Row dict to dataclass:")
    row = {"id": "1", "name": "Alice", "signed_up": "2024-02-29", "active": "yes", "logins": "42"}
    user = mapper.map(row, User)
    print(f"   Type: {type(user).__name__}")
    print(f"   Data: {user}\n")

    # Unconvertible values fall back to the target's default instead of raising
    print("2. Best-effort conversion:")
    row = {"id": "2", "name": "Bob", "signed_up": "not a date", "logins": "99999999999999999999"}
    user = mapper.map(row, User)
    print(f"   signed_up = {user.signed_up!r}")
    print(f"   logins    = {user.logins!r} (overflowed Int32)\n")

    # Objects map onto other shapes member by member
    print("3. Dataclass to Pydantic:")
    alice = User(id=1, name="Alice", signed_up=dt.date(2024, 2, 29), tags=["admin", "beta"])
    summary = mapper.map(alice, UserSummary)
    print(f"   {summary!r}\n")

    # Sequences map element by element
    print("4. map_many:")
    summaries = mapper.map_many([alice, None, user], UserSummary)
    for s in summaries:
        print(f"   - {s!r}")
    print()

    # Deep copies go through the same pipeline
    print("5. clone:")
    copy = mapper.clone(alice)
    print(f"   equal: {copy == alice}, same tags list: {copy.tags is alice.tags}")

    print(f"\nMetrics: {mapper.metrics}")


if __name__ == "__main__":
    main()
