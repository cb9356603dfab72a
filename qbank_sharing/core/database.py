import logging

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from qbank_sharing.core import context as contexts
from qbank_sharing.core.access import DEFAULT_ROLES
from qbank_sharing.core.config import get_settings
from qbank_sharing.models.orm import Base, Course, Role, RoleCapability

logger = logging.getLogger(__name__)

settings = get_settings()
engine = create_engine(settings.DATABASE_URL, future=True, pool_pre_ping=True, echo=settings.DATABASE_ECHO)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def install_defaults(db: Session) -> None:
    """Create the site course, the system context and the built-in roles if missing."""
    contexts.system_context(db)
    site = db.get(Course, settings.SITE_ID)
    if site is None:
        # A fresh table hands out SITE_ID first.
        site = Course(category=0, fullname="Site", shortname="site", groupmode=0, defaultgroupingid=0)
        db.add(site); db.flush()
        if site.id != settings.SITE_ID:
            logger.warning("Site course was created with id %s, expected %s", site.id, settings.SITE_ID)
    contexts.course_context(db, site)
    for shortname, capabilities in DEFAULT_ROLES.items():
        role = db.scalar(select(Role).where(Role.shortname == shortname))
        if role is None:
            role = Role(shortname=shortname, name=shortname)
            db.add(role); db.flush()
            for capability in capabilities:
                db.add(RoleCapability(roleid=role.id, capability=capability, permission=1))
    db.commit()


def init_db(bind=None) -> None:
    """Initialize database, create tables if they don't exist."""
    bind = bind or engine
    Base.metadata.create_all(bind)
    with Session(bind) as db:
        install_defaults(db)
    logger.info("Database initialized")
