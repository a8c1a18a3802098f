import re

from pydantic import BaseModel, field_validator

_CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _number_to_str(value):
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(int(value)) if float(value).is_integer() else str(value)
    return value


# -----------------------------
# Visits
# -----------------------------
class VisitCreate(BaseModel):
    nama: str
    nim: str
    prodi: str
    gender: str
    ruangan: str | list[str]
    umur: int | None = None
    locker_number: str | None = None

    @field_validator("nim", "locker_number", mode="before")
    @classmethod
    def _coerce_numbers(cls, value):
        return _number_to_str(value)

    @field_validator("umur", mode="before")
    @classmethod
    def _blank_age(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def rooms(self) -> list[str]:
        """Room codes in submission order, blanks dropped, duplicates collapsed."""
        raw = [self.ruangan] if isinstance(self.ruangan, str) else self.ruangan
        rooms: list[str] = []
        for room in raw:
            room = room.strip()
            if room and room not in rooms:
                rooms.append(room)
        return rooms

    def locker(self) -> str | None:
        if self.locker_number is None:
            return None
        return self.locker_number.strip() or None

    def age(self) -> int | None:
        # 0 means "not given" on the kiosk form.
        return self.umur or None


class LockerReturn(BaseModel):
    locker_number: str

    @field_validator("locker_number", mode="before")
    @classmethod
    def _coerce_numbers(cls, value):
        return _number_to_str(value)


# -----------------------------
# Auth
# -----------------------------
class AdminLogin(BaseModel):
    username: str
    password: str


class AdminRegister(BaseModel):
    username: str
    password: str
    displayName: str | None = None


class PasswordChange(BaseModel):
    username: str
    currentPassword: str
    newPassword: str


# -----------------------------
# Settings
# -----------------------------
class DayHours(BaseModel):
    buka: str
    tutup: str
    aktif: bool = True

    @field_validator("buka", "tutup")
    @classmethod
    def _clock_format(cls, value: str) -> str:
        value = value.strip()
        if not _CLOCK_RE.match(value):
            raise ValueError("must be HH:MM")
        return value


class OperatingHours(BaseModel):
    senin: DayHours
    selasa: DayHours
    rabu: DayHours
    kamis: DayHours
    jumat: DayHours
    sabtu: DayHours
    minggu: DayHours


class SettingValue(BaseModel):
    value: str
