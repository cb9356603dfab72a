from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import BigInteger, Integer, String, Text, ForeignKey, SmallInteger, UniqueConstraint


class Base(DeclarativeBase): pass


class CourseCategory(Base):
    __tablename__ = "course_categories"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    parent: Mapped[int] = mapped_column(BigInteger, default=0)


class Course(Base):
    __tablename__ = "course"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    category: Mapped[int] = mapped_column(BigInteger, default=0)
    fullname: Mapped[str] = mapped_column(String(254))
    shortname: Mapped[str] = mapped_column(String(255))
    groupmode: Mapped[int] = mapped_column(SmallInteger, default=0)
    defaultgroupingid: Mapped[int] = mapped_column(BigInteger, default=0)


class Module(Base):
    """Installed activity module plugins."""
    __tablename__ = "modules"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    name: Mapped[str] = mapped_column(String(20), unique=True)
    visible: Mapped[int] = mapped_column(SmallInteger, default=1)


class CourseModule(Base):
    __tablename__ = "course_modules"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    course: Mapped[int] = mapped_column(BigInteger, ForeignKey("course.id"), index=True)
    module: Mapped[int] = mapped_column(BigInteger, ForeignKey("modules.id"))
    instance: Mapped[int] = mapped_column(BigInteger)
    section: Mapped[int] = mapped_column(BigInteger, default=0)
    idnumber: Mapped[str | None] = mapped_column(String(100), nullable=True)
    visible: Mapped[int] = mapped_column(SmallInteger, default=1)
    visibleoncoursepage: Mapped[int] = mapped_column(SmallInteger, default=1)
    groupmode: Mapped[int] = mapped_column(SmallInteger, default=0)
    groupingid: Mapped[int] = mapped_column(BigInteger, default=0)
    downloadcontent: Mapped[int] = mapped_column(SmallInteger, default=1)
    showdescription: Mapped[int] = mapped_column(SmallInteger, default=0)
    deletioninprogress: Mapped[int] = mapped_column(SmallInteger, default=0)


class Context(Base):
    __tablename__ = "context"
    __table_args__ = (UniqueConstraint("contextlevel", "instanceid", name="uq_context_instance"),)
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    contextlevel: Mapped[int] = mapped_column(Integer)
    instanceid: Mapped[int] = mapped_column(BigInteger)
    path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    depth: Mapped[int] = mapped_column(SmallInteger, default=0)


class QuestionCategory(Base):
    __tablename__ = "question_categories"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    contextid: Mapped[int] = mapped_column(BigInteger, ForeignKey("context.id"), index=True)
    info: Mapped[str] = mapped_column(Text, default="")
    parent: Mapped[int] = mapped_column(BigInteger, default=0)
    sortorder: Mapped[int] = mapped_column(BigInteger, default=999)


# Activity plugin instance tables

class Qbank(Base):
    __tablename__ = "qbank"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    course: Mapped[int] = mapped_column(BigInteger, ForeignKey("course.id"))
    name: Mapped[str] = mapped_column(String(1333))
    intro: Mapped[str | None] = mapped_column(Text, nullable=True)
    introformat: Mapped[int] = mapped_column(SmallInteger, default=0)
    type: Mapped[str] = mapped_column(String(10), default="standard")


class Quiz(Base):
    __tablename__ = "quiz"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    course: Mapped[int] = mapped_column(BigInteger, ForeignKey("course.id"))
    name: Mapped[str] = mapped_column(String(1333))
    intro: Mapped[str | None] = mapped_column(Text, nullable=True)
    introformat: Mapped[int] = mapped_column(SmallInteger, default=0)


class Page(Base):
    __tablename__ = "page"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    course: Mapped[int] = mapped_column(BigInteger, ForeignKey("course.id"))
    name: Mapped[str] = mapped_column(String(1333))
    intro: Mapped[str | None] = mapped_column(Text, nullable=True)
    introformat: Mapped[int] = mapped_column(SmallInteger, default=0)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)


# Users, preferences and permissions

class User(Base):
    __tablename__ = "user"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    username: Mapped[str] = mapped_column(String(100), unique=True)
    firstname: Mapped[str] = mapped_column(String(100), default="")
    lastname: Mapped[str] = mapped_column(String(100), default="")


class UserPreference(Base):
    __tablename__ = "user_preferences"
    __table_args__ = (UniqueConstraint("userid", "name", name="uq_user_preference"),)
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    userid: Mapped[int] = mapped_column(BigInteger, ForeignKey("user.id"))
    name: Mapped[str] = mapped_column(String(255))
    value: Mapped[str] = mapped_column(String(1333), default="")


class Role(Base):
    __tablename__ = "role"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    shortname: Mapped[str] = mapped_column(String(100), unique=True)
    name: Mapped[str] = mapped_column(String(255), default="")


class RoleCapability(Base):
    __tablename__ = "role_capabilities"
    __table_args__ = (UniqueConstraint("roleid", "capability", name="uq_role_capability"),)
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    roleid: Mapped[int] = mapped_column(BigInteger, ForeignKey("role.id"))
    capability: Mapped[str] = mapped_column(String(255))
    permission: Mapped[int] = mapped_column(SmallInteger, default=1)


class RoleAssignment(Base):
    __tablename__ = "role_assignments"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    roleid: Mapped[int] = mapped_column(BigInteger, ForeignKey("role.id"))
    userid: Mapped[int] = mapped_column(BigInteger, ForeignKey("user.id"), index=True)
    contextid: Mapped[int] = mapped_column(BigInteger, ForeignKey("context.id"), index=True)
