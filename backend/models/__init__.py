from models.section import Section
from models.section_subject import SectionSubject
from models.subject import Subject
from models.teacher import Teacher
from models.timetable_entry import TimetableEntry

__all__ = [
	"Section",
	"SectionSubject",
	"Subject",
	"Teacher",
	"TimetableEntry",
]
