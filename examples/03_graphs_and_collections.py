"""
Example 03: Object Graphs and Collections

This example demonstrates cycle detection, the depth limit, collection
reconstruction and cancellation.
"""

from graph_mapper import Mapper, MappingSettings, TraversalContext
from dataclasses import dataclass, field
from queue import LifoQueue


@dataclass
class Category:
    name: str = ""
    parent: "Category | None" = None
    children: list["Category"] = field(default_factory=list)


def build_tree() -> Category:
    root = Category("root")
    for name in ("books", "music"):
        child = Category(name, parent=root)
        child.children.append(Category(f"{name}/used", parent=child))
        root.children.append(child)
    return root


def main():
    print("=== Object Graphs and Collections ===\n")

    # Back references to parents are cycles: they are cut, never followed forever
    print("1. Cycle detection:")
    mapper = Mapper()
    copy = mapper.clone(build_tree())
    print(f"   children: {[c.name for c in copy.children]}")
    print(f"   parent of 'books' copied as: {copy.children[0].parent!r}")
    print(f"   cycles detected: {mapper.metrics.cycles_detected}\n")

    # The depth limit truncates deep graphs silently
    print("2. Depth limit:")
    shallow = Mapper(MappingSettings(max_depth=2))
    copy = shallow.clone(build_tree())
    print(f"   grandchild name: {copy.children[0].children[0].name!r}\n")

    # Collections are rebuilt as the destination type asks
    print("3. Collection reconstruction:")
    stack = mapper.map(["a", "b", "c"], LifoQueue)
    print(f"   LifoQueue pops: {[stack.get() for _ in range(3)]}")
    print(f"   tuple[int, ...]: {mapper.map(['1', '2', 'x'], tuple[int, ...])}")
    print(f"   set[str]: {sorted(mapper.map(['b', 'a', 'b'], set[str]))}\n")

    # A cancelled context returns destinations as they stand
    print("4. Cancellation:")
    context = TraversalContext()
    context.cancel("shutting down")
    print(f"   {mapper.map(build_tree(), Category, context=context)!r}")


if __name__ == "__main__":
    main()
