import threading
from typing import Dict, List, Optional
from schemas import RosterData, Teacher, Student, Lesson

class RosterStore:
    """
    In-memory home of the three entity collections. Readers get list snapshots;
    writers hold `lock` across their whole check-then-write sequence.
    """

    def __init__(self, roster: Optional[RosterData] = None):
        if roster is None:
            roster = RosterData()
        self.lock = threading.RLock()
        self._teachers: Dict[str, Teacher] = {t.id: t for t in roster.teachers}
        self._students: Dict[str, Student] = {s.id: s for s in roster.students}
        self._lessons: Dict[str, Lesson] = {l.id: l for l in roster.lessons}

    # --- Snapshots ---

    @property
    def teachers(self) -> List[Teacher]:
        with self.lock:
            return list(self._teachers.values())

    @property
    def students(self) -> List[Student]:
        with self.lock:
            return list(self._students.values())

    @property
    def lessons(self) -> List[Lesson]:
        with self.lock:
            return list(self._lessons.values())

    def snapshot(self) -> RosterData:
        with self.lock:
            return RosterData(teachers=self.teachers, students=self.students, lessons=self.lessons)

    # --- Lookups ---

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        return self._teachers.get(teacher_id)

    def get_student(self, student_id: str) -> Optional[Student]:
        return self._students.get(student_id)

    def get_lesson(self, lesson_id: str) -> Optional[Lesson]:
        return self._lessons.get(lesson_id)

    def preferred_teacher(self, student: Student) -> Optional[Teacher]:
        """Resolves the student's preferred teacher; a dangling id means no preference."""
        if not student.preferred_teacher_id:
            return None
        return self._teachers.get(student.preferred_teacher_id)

    # --- Writes ---

    def save_teacher(self, teacher: Teacher) -> None:
        with self.lock:
            self._teachers[teacher.id] = teacher

    def save_student(self, student: Student) -> None:
        with self.lock:
            self._students[student.id] = student

    def save_lesson(self, lesson: Lesson) -> None:
        with self.lock:
            self._lessons[lesson.id] = lesson
