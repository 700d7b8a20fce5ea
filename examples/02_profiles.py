"""
Example 02: Mapping Profiles

This example demonstrates custom member rules, conditional rules, ignored
members and post-transforms, grouped in a ProfileModule.
"""

from graph_mapper import Mapper, ProfileModule, ProfileStore
from dataclasses import dataclass, replace
from decimal import Decimal


@dataclass
class Employee:
    first_name: str
    last_name: str
    salary: Decimal
    manager: bool = False
    ssn: str = ""


@dataclass
class EmployeeCard:
    full_name: str = ""
    salary: str = ""
    role: str = ""
    ssn: str = ""


class HrProfiles(ProfileModule):
    """All HR projections in one place"""

    def configure(self, profiles: ProfileStore) -> None:
        (
            profiles.create_map(Employee, EmployeeCard)
            .for_member("full_name", lambda s: f"{s.first_name} {s.last_name}")
            .ignore("ssn")
            .when(
                lambda s: s.manager,
                lambda s, d: setattr(d, "role", "manager"),
                lambda s, d: setattr(d, "role", "staff"),
            )
            .transform(lambda d: replace(d, salary=f"EUR {d.salary}"))
        )


def main():
    mapper = Mapper().add_profile(HrProfiles)

    print("=== Mapping Profiles ===\n")

    staff = [
        Employee("Ada", "Lovelace", Decimal("5200.00"), manager=True, ssn="123-45-6789"),
        Employee("Charles", "Babbage", Decimal("4100.50"), ssn="987-65-4321"),
    ]
    for card in mapper.map_many(staff, EmployeeCard):
        print(f"   {card}")
    print()

    # Profiles can also be declared inline
    mapper.create_map(EmployeeCard, Employee).for_member(
        "first_name", lambda s: s.full_name.split()[0]
    ).for_member("last_name", lambda s: s.full_name.split()[-1])
    back = mapper.map(EmployeeCard(full_name="Grace Hopper", salary="1000"), Employee)
    print(f"   Round trip: {back}")


if __name__ == "__main__":
    main()
