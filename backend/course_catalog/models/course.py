from typing import List

from pydantic import BaseModel, ConfigDict, Field


class CourseIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    icon: str = Field(min_length=1)


class Course(CourseIn):
    id: str

    @classmethod
    def from_doc(cls, doc: dict) -> "Course":
        return cls(
            id=str(doc["_id"]),
            title=doc["title"],
            description=doc["description"],
            icon=doc["icon"],
        )


class EnrollRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_id: str = Field(alias="courseId")


class EnrolledCourses(BaseModel):
    courses: List[Course]
