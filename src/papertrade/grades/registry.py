"""
Student grade registry.

Students are looked up case-insensitively by name and kept in insertion
order. Per-student statistics are 0.0 for a student with no grades; class
statistics are None when no grades exist anywhere.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd


class GradeError(ValueError):
    pass


class StudentNotFound(GradeError):
    def __init__(self, name: str):
        super().__init__(f"Student not found: {name}")
        self.name = name


class InvalidGrade(GradeError):
    def __init__(self, grade: object):
        super().__init__(f"Grade must be a non-negative number, got {grade!r}")
        self.grade = grade


class InvalidStudentName(GradeError):
    def __init__(self):
        super().__init__("Name empty.")


@dataclass
class Student:
    name: str
    grades: List[float] = field(default_factory=list)

    def add_grade(self, grade: float) -> None:
        self.grades.append(float(grade))

    def average(self) -> float:
        return sum(self.grades) / len(self.grades) if self.grades else 0.0

    def highest(self) -> float:
        return max(self.grades) if self.grades else 0.0

    def lowest(self) -> float:
        return min(self.grades) if self.grades else 0.0

    def summary(self) -> str:
        if not self.grades:
            return "No grades."
        return (
            f"Avg: {self.average():.2f}, High: {self.highest():.2f}, "
            f"Low: {self.lowest():.2f}, Count: {len(self.grades)}"
        )


@dataclass(frozen=True)
class ClassStats:
    average: float
    highest: float
    lowest: float
    count: int


class GradeRegistry:
    def __init__(self):
        self._students: List[Student] = []

    def __len__(self) -> int:
        return len(self._students)

    def __iter__(self):
        return iter(self._students)

    def find(self, name: str) -> Optional[Student]:
        key = name.strip().lower()
        for s in self._students:
            if s.name.lower() == key:
                return s
        return None

    def get(self, name: str) -> Student:
        s = self.find(name)
        if s is None:
            raise StudentNotFound(name)
        return s

    def add_student(self, name: str) -> Student:
        name = name.strip()
        if not name:
            raise InvalidStudentName()
        s = Student(name)
        self._students.append(s)
        return s

    def add_grade(self, name: str, grade: float, create: bool = False) -> Student:
        try:
            value = float(grade)
        except (TypeError, ValueError):
            raise InvalidGrade(grade)
        if value < 0 or value != value:
            raise InvalidGrade(grade)
        s = self.find(name)
        if s is None:
            if not create:
                raise StudentNotFound(name)
            s = self.add_student(name)
        s.add_grade(value)
        return s

    def remove(self, name: str) -> Student:
        s = self.get(name)
        self._students.remove(s)
        return s

    def class_stats(self) -> Optional[ClassStats]:
        grades = [g for s in self._students for g in s.grades]
        if not grades:
            return None
        return ClassStats(
            average=sum(grades) / len(grades),
            highest=max(grades),
            lowest=min(grades),
            count=len(grades),
        )

    def summary_frame(self) -> pd.DataFrame:
        rows: List[Dict[str, object]] = [
            {
                "name": s.name,
                "count": len(s.grades),
                "average": s.average(),
                "highest": s.highest(),
                "lowest": s.lowest(),
            }
            for s in self._students
        ]
        return pd.DataFrame(rows, columns=["name", "count", "average", "highest", "lowest"])
