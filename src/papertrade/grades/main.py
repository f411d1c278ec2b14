"""Console grade tracker: `gradebook` console script / `python -m papertrade.grades.main`."""
import logging
import os
from typing import Callable

from papertrade.grades.registry import GradeError, GradeRegistry

log = logging.getLogger("papertrade.grades")

MENU = """
Menu:
1. Add new student
2. Add grade to student
3. View student details
4. Remove student
5. Display summary report (all students)
6. Exit"""


def add_student(reg: GradeRegistry, ask, out) -> None:
    name = ask("Enter student name: ")
    try:
        s = reg.add_student(name)
    except GradeError as e:
        out(f"{e} Cancelled.")
        return
    out(f"Added student: {s.name}")


def add_grade(reg: GradeRegistry, ask, out) -> None:
    name = ask("Student name: ").strip()
    create = False
    if reg.find(name) is None:
        if not name:
            out("Name empty. Cancelled.")
            return
        if ask("Student not found. Create new? (y/n): ").strip().lower() != "y":
            return
        create = True
    raw = ask("Enter grade (number): ").strip()
    try:
        s = reg.add_grade(name, raw, create=create)
    except GradeError as e:
        out(str(e))
        return
    if create:
        out(f"Created student: {s.name}")
    out(f"Added grade {s.grades[-1]} to {s.name}")


def view_student(reg: GradeRegistry, ask, out) -> None:
    s = reg.find(ask("Student name: "))
    if s is None:
        out("Student not found.")
        return
    out(f"Name: {s.name}")
    if not s.grades:
        out("No grades yet.")
        return
    out(f"Grades: {s.grades}")
    out(s.summary())


def remove_student(reg: GradeRegistry, ask, out) -> None:
    name = ask("Student name to remove: ").strip()
    try:
        reg.remove(name)
    except GradeError:
        out("Student not found.")
        return
    out(f"Removed {name}")


def summary_report(reg: GradeRegistry, ask, out) -> None:
    out("\n--- Summary Report ---")
    if not len(reg):
        out("No students to report.")
        return
    for idx, s in enumerate(reg, start=1):
        out(f"{idx}) {s.name} -> {s.summary()}")
    stats = reg.class_stats()
    if stats is None:
        out("No grades recorded for class-level stats.")
        return
    out(
        f"Class average: {stats.average:.2f}, Class high: {stats.highest:.2f}, "
        f"Class low: {stats.lowest:.2f}, Total grades: {stats.count}"
    )


COMMANDS = {
    "1": add_student,
    "2": add_grade,
    "3": view_student,
    "4": remove_student,
    "5": summary_report,
}


def run(reg: GradeRegistry, ask: Callable[[str], str] = input, out: Callable[[str], None] = print) -> None:
    out("=== Student Grade Tracker ===")
    while True:
        out(MENU)
        try:
            choice = ask("Choose: ").strip()
            if choice == "6":
                break
            handler = COMMANDS.get(choice)
            if handler is None:
                out("Invalid option. Try again.")
                continue
            handler(reg, ask, out)
        except EOFError:
            out("")
            break
    log.info(f"grade session closed with {len(reg)} student(s)")
    out("Goodbye.")


def main() -> None:
    logging.basicConfig(
        level=os.getenv("PAPERTRADE_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    run(GradeRegistry())


if __name__ == "__main__":
    main()
