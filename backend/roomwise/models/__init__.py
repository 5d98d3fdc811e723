from roomwise.models.classroom import Classroom, ClassroomStatus, ClassroomType  # noqa: F401
from roomwise.models.department import Department  # noqa: F401
from roomwise.models.enrollment import Enrollment, EnrollmentStatus  # noqa: F401
from roomwise.models.faculty import Faculty, FacultyStatus  # noqa: F401
from roomwise.models.subject import Subject  # noqa: F401
from roomwise.models.time_slot import DAY_ORDER, DayOfWeek, TimeSlot  # noqa: F401
from roomwise.models.timetable_entry import TimetableEntry  # noqa: F401
