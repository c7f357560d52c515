import re

from gallery.services.naming import (
    classify,
    display_title,
    generate_storage_name,
    recover_title,
    sanitize_name,
)


def test_generate_storage_name_layout():
    name = generate_storage_name("My Photo.png", now_ms=1700000000000, nonce=123456789)
    assert name == "1700000000000-123456789-My_Photo.png"


def test_generate_storage_name_uses_clock_and_random_by_default():
    name = generate_storage_name("beach.jpg")
    assert re.fullmatch(r"\d{13,}-\d+-beach\.jpg", name)


def test_sanitize_collapses_whitespace_runs():
    assert sanitize_name("a  b\tc.mp4") == "a_b_c.mp4"


def test_sanitize_strips_directories():
    assert sanitize_name("../../etc/passwd") == "passwd"
    assert sanitize_name("C:\\fakepath\\photo.jpg") == "photo.jpg"
    assert sanitize_name("..") == "unnamed"
    assert sanitize_name("") == "unnamed"


def test_title_is_recovered_from_generated_name():
    name = generate_storage_name("Đà Lạt 2023.jpeg")
    assert recover_title(name) == "Đà_Lạt_2023"


def test_title_keeps_dashes_of_original_name():
    assert recover_title("1700000000000-1-my-trip.mov") == "my-trip"


def test_title_of_foreign_name_is_empty():
    assert recover_title("holiday.png") == ""


def test_display_title():
    assert display_title("1700000000000-123456789-My_Photo.png") == "Kỷ niệm My_Photo"


def test_classify_by_extension():
    assert classify("a.PNG") == "image"
    assert classify("legacy.bmp") == "image"
    assert classify("clip.webm") == "video"
    assert classify("legacy.mkv") == "video"
    assert classify("notes.txt") == "unknown"
    assert classify("no_extension") == "unknown"


def test_title_stops_at_first_dot():
    assert recover_title("1-1-a.b.png") == "a"


def test_title_of_extension_only_name_is_empty():
    assert recover_title("1-1-.png") == ""
    assert display_title("1-1-.png") == "Kỷ niệm "
