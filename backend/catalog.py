from types import MappingProxyType

ROOMS: tuple[str, ...] = (
    "audiovisual",
    "referensi",
    "sirkulasi_l1",
    "sirkulasi_l2",
    "sirkulasi_l3",
    "karel",
    "smartlab",
    "bicorner",
)

GENDERS: tuple[str, ...] = ("L", "P")

UNKNOWN_FACULTY = "Unknown"

FACULTY_BY_PRODI = MappingProxyType({
    "S1 Kedokteran Umum": "Fakultas Kedokteran",
    "S2 Biomedik": "Fakultas Kedokteran",
    "S3 Biomedik": "Fakultas Kedokteran",
    "S1 Kedokteran Gigi": "Fakultas Kedokteran Gigi",
    "S2 Kedokteran Gigi": "Fakultas Kedokteran Gigi",
    "S1 Teknik Sipil": "Fakultas Teknik",
    "S2 Teknik Sipil": "Fakultas Teknik",
    "S3 Teknik Sipil": "Fakultas Teknik",
    "S1 Planologi": "Fakultas Teknik",
    "S2 Planologi": "Fakultas Teknik",
    "S1 Ilmu Hukum": "Fakultas Hukum",
    "S2 Ilmu Hukum": "Fakultas Hukum",
    "S2 Kenotariatan": "Fakultas Hukum",
    "S3 Doktor Ilmu Hukum": "Fakultas Hukum",
    "D3 Akuntansi": "Fakultas Ekonomi",
    "S1 Akuntansi": "Fakultas Ekonomi",
    "S2 Akuntansi": "Fakultas Ekonomi",
    "S1 Manajemen": "Fakultas Ekonomi",
    "S2 Manajemen": "Fakultas Ekonomi",
    "S3 Manajemen": "Fakultas Ekonomi",
    "S1 Hukum Keluarga": "Fakultas Agama Islam",
    "S1 Pendidikan Agama Islam": "Fakultas Agama Islam",
    "S2 Pendidikan Agama Islam": "Fakultas Agama Islam",
    "S1 Teknik Industri": "Fakultas Teknologi Industri",
    "S1 Teknik Informatika": "Fakultas Teknologi Industri",
    "S1 Teknik Elektro": "Fakultas Teknologi Industri",
    "S2 Teknik Elektro": "Fakultas Teknologi Industri",
    "S1 Psikologi": "Fakultas Psikologi",
    "D3 Keperawatan": "Fakultas Ilmu Keperawatan",
    "S1 Keperawatan": "Fakultas Ilmu Keperawatan",
    "S2 Keperawatan": "Fakultas Ilmu Keperawatan",
    "S1 Ilmu Komunikasi": "Fakultas Ilmu Komunikasi",
    "S1 Pendidikan Bahasa Inggris": "Fakultas Bahasa, Sastra dan Budaya",
    "S1 Sastra Inggris": "Fakultas Bahasa, Sastra dan Budaya",
    "S1 Pendidikan Matematika": "Fakultas Keguruan dan Ilmu Pendidikan",
    "S2 Matematika": "Fakultas Keguruan dan Ilmu Pendidikan",
    "S1 PBSI": "Fakultas Keguruan dan Ilmu Pendidikan",
    "S2 PBSI": "Fakultas Keguruan dan Ilmu Pendidikan",
    "S1 PGSD": "Fakultas Keguruan dan Ilmu Pendidikan",
    "S2 PGSD": "Fakultas Keguruan dan Ilmu Pendidikan",
    "S1 Farmasi": "Fakultas Farmasi",
    "S1 Kebidanan": "Fakultas Farmasi",
})

WEEKDAYS: tuple[str, ...] = ("senin", "selasa", "rabu", "kamis", "jumat", "sabtu", "minggu")

DEFAULT_OPERATING_HOURS = MappingProxyType({
    "senin": {"buka": "08:00", "tutup": "17:00", "aktif": True},
    "selasa": {"buka": "08:00", "tutup": "17:00", "aktif": True},
    "rabu": {"buka": "08:00", "tutup": "17:00", "aktif": True},
    "kamis": {"buka": "08:00", "tutup": "17:00", "aktif": True},
    "jumat": {"buka": "08:00", "tutup": "17:00", "aktif": True},
    "sabtu": {"buka": "08:00", "tutup": "12:00", "aktif": True},
    "minggu": {"buka": "00:00", "tutup": "00:00", "aktif": False},
})


def faculty_for(prodi: str) -> str:
    return FACULTY_BY_PRODI.get(prodi.strip(), UNKNOWN_FACULTY)


def invalid_rooms(rooms: list[str]) -> list[str]:
    return [room for room in rooms if room not in ROOMS]
