"""Showcase examples for pragmagraph, written to docs/."""

from pragmagraph import dsl
from pragmagraph import (
    custom,
    diagram,
    entry,
    exit_node,
    exit_point,
    operate,
    practice,
    relation,
    vocabulary,
)


def hero_example():
    """Hero example: a small MUD with qualified, resultant and bidirectional relations."""
    with diagram(
            name="Inferential Vocabulary",
            mode="MUD",
            output="docs/hero",
            formats=("svg", "tex", "json"),
    ):
        # V1 and P1 form the classic pragmatically mediated semantic relation
        reasons = practice("Giving and asking for reasons", at=(100, 250), subtype="autonomous")
        logic = vocabulary("Logical vocabulary", at=(400, 100), subtype="meta")
        base = vocabulary("Base vocabulary", at=(400, 400), subtype="base")

        reasons >> logic | "PV-suff"
        base >> reasons | "VP-nec"

        # Opposite directions between the same pair curve to opposite sides
        logic >> reasons | "VP"
        relation(base, logic, "VV", resultant=True, label="elaborates")


def example_tote():
    """A TOTE cycle: test, operate, feedback, exit."""
    with diagram(
            name="Hammering a Nail",
            mode="TOTE",
            output="docs/example_tote",
            formats=("svg", "tex"),
    ):
        check = dsl.test("Nail flush?", at=(250, 150), condition="head is flush with the surface")
        hammer = operate("Strike", at=(250, 350), operations=["lift", "strike"])
        done = exit_node("Done", at=(500, 150))

        entry(check, at=(60, 150))
        check >> hammer | "sequence"
        hammer >> check | "feedback"
        check >> done | "exit"
        exit_point(done, at=(640, 150))

        # Repeated strikes
        hammer >> hammer | "loop"


def example_generic():
    """Generic mode: custom nodes with polygon shapes and a parallel fan."""
    with diagram(name="Shapes", mode="GENERIC", output="docs/example_generic"):
        hub = custom("Hub", at=(300, 250), shape="hexagon")
        star = custom("Star", at=(550, 250), shape="star", size="large")
        tri = custom("Triangle", at=(300, 450), shape="triangle", size="small")

        for text in ("first", "second", "third"):
            hub >> star | text
        relation(hub, tri, "custom", label="points to")


if __name__ == "__main__":
    import os

    os.makedirs("docs", exist_ok=True)

    print("Generating hero example...")
    hero_example()

    print("Generating TOTE example...")
    example_tote()

    print("Generating generic example...")
    example_generic()

    print("\nAll examples generated in docs/")
