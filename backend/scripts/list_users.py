from sqlmodel import Session, select

from app.db.session import engine
from app.models.user import Profile, User

with Session(engine) as s:
    rows = s.exec(select(User, Profile).join(Profile, Profile.id == User.id, isouter=True)).all()
    for user, profile in rows:
        role = profile.role if profile else "-"
        name = profile.full_name if profile and profile.full_name else "-"
        print(f"ID: {user.id} | Email: {user.email} | Name: {name} | Role: {role} | Active: {user.is_active}")
