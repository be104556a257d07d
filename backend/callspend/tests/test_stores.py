from datetime import datetime

import pytest

from callspend.database import transaction
from callspend.errors import InvalidFileNameError, NotFoundError
from callspend.models import FILE_NAME_MAX_LENGTH, CallRecord, Upload
from callspend.services.records import clear_all, count_all, insert_batch, page_records
from callspend.services.uploads import (
    count_records,
    create_upload,
    delete_upload,
    get_upload,
    list_uploads,
    record_counts,
)


def _seed(db, make_record, file_name="calls.xlsx", count=3):
    with transaction(db):
        upload = create_upload(db, file_name)
        insert_batch(db, upload.id, [make_record(f"10{index}", index) for index in range(count)])
        upload_id = upload.id
    return upload_id


def test_create_upload_assigns_id_and_timestamp(db):
    with transaction(db):
        upload = create_upload(db, " march.xlsx ")
        assert upload.id is not None
    assert upload.file_name == "march.xlsx"
    assert isinstance(upload.upload_date, datetime)


def test_create_upload_rejects_blank_name(db):
    with pytest.raises(InvalidFileNameError) as excinfo:
        create_upload(db, "   ")
    assert "Row" not in str(excinfo.value)


def test_create_upload_rejects_overlong_name(db):
    name = "a" * FILE_NAME_MAX_LENGTH + ".xlsx"
    with pytest.raises(InvalidFileNameError):
        create_upload(db, name)
    assert list_uploads(db) == []


def test_create_upload_keeps_name_at_length_limit(db):
    name = "b" * (FILE_NAME_MAX_LENGTH - 5) + ".xlsx"
    with transaction(db):
        upload = create_upload(db, name)
    assert get_upload(db, upload.id).file_name == name


def test_list_uploads_most_recent_first(db):
    with transaction(db):
        db.add_all(
            [
                Upload(file_name="old.xlsx", upload_date=datetime(2024, 1, 1)),
                Upload(file_name="new.xlsx", upload_date=datetime(2024, 3, 1)),
                Upload(file_name="mid.xlsx", upload_date=datetime(2024, 2, 1)),
            ]
        )
    assert [upload.file_name for upload in list_uploads(db)] == ["new.xlsx", "mid.xlsx", "old.xlsx"]


def test_get_upload_unknown_id(db):
    with pytest.raises(NotFoundError):
        get_upload(db, 404)


def test_delete_upload_cascades_to_records(db, make_record):
    kept = _seed(db, make_record, "kept.xlsx", count=2)
    dropped = _seed(db, make_record, "dropped.xlsx", count=3)
    with transaction(db):
        assert delete_upload(db, dropped) == 1
    assert db.query(CallRecord).filter(CallRecord.upload_id == dropped).count() == 0
    assert count_records(db, kept) == 2
    assert record_counts(db) == {kept: 2}
    assert [upload.id for upload in list_uploads(db)] == [kept]


def test_delete_unknown_upload_is_noop(db, make_record):
    upload_id = _seed(db, make_record)
    with transaction(db):
        assert delete_upload(db, upload_id + 100) == 0
    assert count_all(db) == 3
    assert len(list_uploads(db)) == 1


def test_insert_batch_tags_records(db, make_record):
    upload_id = _seed(db, make_record, count=4)
    assert {record.upload_id for record in page_records(db)} == {upload_id}


def test_page_records_orders_by_id(db, make_record):
    _seed(db, make_record, count=5)
    first = page_records(db, 1, 2)
    second = page_records(db, 2, 2)
    third = page_records(db, 3, 2)
    ids = [record.id for record in first + second + third]
    assert ids == sorted(ids)
    assert [len(first), len(second), len(third)] == [2, 2, 1]


def test_invalid_paging_defaults_to_first_hundred(db, make_record):
    with transaction(db):
        insert_batch(db, None, [make_record(str(index), 0) for index in range(120)])
    defaults = [record.id for record in page_records(db, 1, 100)]
    assert len(defaults) == 100
    assert [record.id for record in page_records(db, 0, -5)] == defaults
    assert [record.id for record in page_records(db, None, None)] == defaults


def test_clear_all_keeps_uploads(db, make_record):
    _seed(db, make_record)
    with transaction(db):
        assert clear_all(db) == 3
    assert count_all(db) == 0
    assert len(list_uploads(db)) == 1
