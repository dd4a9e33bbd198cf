import io

import pytest

from mvstools.catalog import (
    Catalog,
    Dataset,
    DirectoryStore,
    Org,
    leap_days,
    parse_dscb,
    parse_pds_directory,
    read_vtoc,
)


def make_dscb(name, org_byte, year=70, day=1, fmt=0xF1):
    record = bytearray(96)
    record[:44] = name.ljust(44).encode("cp037")
    record[44] = fmt
    record[75] = year
    record[76:78] = day.to_bytes(2, "big")
    record[82] = org_byte
    return bytes(record)


def entry(name, user_halfwords=0):
    return (
        name.ljust(8).encode("cp037")
        + b"\x00\x00\x01"
        + bytes([user_halfwords])
        + b"\x00" * (2 * user_halfwords)
    )


def block(entries, end=False):
    body = b"".join(entries)
    if end:
        body += b"\xff" * 8
    used = 2 + len(body)
    return b"\x00\x00" + (used.to_bytes(2, "big") + body).ljust(256, b"\x00")


def test_leap_days_epoch_is_zero():
    assert leap_days(1970) == 0


@pytest.mark.parametrize("year", range(1970, 2100))
def test_leap_days_steps_by_year_length(year):
    step = leap_days(year + 1) - leap_days(year)
    assert step == (366 if year % 4 == 0 else 365)


@pytest.mark.parametrize("year", [1969, 2221])
def test_leap_days_out_of_range(year):
    with pytest.raises(ValueError):
        leap_days(year)


def test_parse_dscb_partitioned():
    dataset = parse_dscb(make_dscb("SYS1.MACLIB", 0x02))
    assert dataset == Dataset(name="SYS1.MACLIB", date=0, org=Org.PO)


def test_parse_dscb_sequential_with_date():
    dataset = parse_dscb(make_dscb("USER.DATA", 0x40, year=71, day=3))
    assert dataset.org is Org.PS
    assert dataset.date == (leap_days(1971) + 2) * 86400


def test_parse_dscb_two_digit_year_before_70_is_next_century():
    dataset = parse_dscb(make_dscb("A.B", 0x40, year=5, day=1))
    assert dataset.date == leap_days(2005) * 86400


def test_parse_dscb_skips_other_formats_and_orgs():
    assert parse_dscb(make_dscb("A.B", 0x40, fmt=0xF4)) is None
    assert parse_dscb(make_dscb("A.B", 0x20)) is None


def test_parse_dscb_short_record():
    with pytest.raises(ValueError):
        parse_dscb(b"\x00" * 10)


def test_read_vtoc_filters_and_ignores_trailing_fragment():
    data = (
        make_dscb("ONE.PS", 0x40)
        + make_dscb("SKIP.ME", 0x40, fmt=0xF5)
        + make_dscb("TWO.PO", 0x02)
        + b"\x00" * 20
    )
    names = [d.name for d in read_vtoc(io.BytesIO(data))]
    assert names == ["ONE.PS", "TWO.PO"]


def test_parse_pds_directory_across_blocks():
    data = block([entry("ALPHA"), entry("BETA", 3)]) + block([entry("GAMMA")], end=True)
    data += block([entry("NEVER")])
    assert parse_pds_directory(io.BytesIO(data)) == ["ALPHA", "BETA", "GAMMA"]


def test_parse_pds_directory_without_end_mark():
    data = block([entry("X1"), entry("X2", 1)])
    assert parse_pds_directory(io.BytesIO(data)) == ["X1", "X2"]


def test_parse_pds_directory_caps_member_count():
    per_block = 20
    blocks = [
        block([entry(f"M{b:03d}{i:02d}") for i in range(per_block)]) for b in range(160)
    ]
    names = parse_pds_directory(io.BytesIO(b"".join(blocks)))
    assert len(names) == 3000
    assert names[0] == "M00000"


def test_catalog_lookup_ignores_case():
    items = [Dataset("SYS1.MACLIB", 0, Org.PO), Dataset("USER.DATA", 0, Org.PS)]
    catalog = Catalog(lambda: items)
    assert catalog.refresh() is True
    assert len(catalog) == 2
    assert catalog.org_of("sys1.maclib") is Org.PO
    assert catalog.org_of("user.data") is Org.PS
    assert catalog.org_of("missing") is None
    assert [d.name for d in catalog] == ["SYS1.MACLIB", "USER.DATA"]


def test_catalog_refresh_failure_keeps_old_list():
    calls = []

    def loader():
        calls.append(1)
        if len(calls) > 1:
            raise OSError("volume offline")
        return [Dataset("A.B", 0, Org.PS)]

    catalog = Catalog(loader)
    assert catalog.refresh() is True
    assert catalog.refresh() is False
    assert catalog.find("a.b") == Dataset("A.B", 0, Org.PS)


@pytest.fixture
def store(tmp_path):
    pds = tmp_path / "sys1.maclib"
    pds.mkdir()
    (pds / "abc").write_bytes(b"member text")
    (tmp_path / "user.data").write_bytes(b"sequential")
    return DirectoryStore(tmp_path)


def test_store_datasets(store):
    datasets = store.datasets()
    assert [(d.name, d.org) for d in datasets] == [
        ("SYS1.MACLIB", Org.PO),
        ("USER.DATA", Org.PS),
    ]
    assert all(d.date % 86400 == 0 for d in datasets)


def test_store_members(store):
    assert store.members("SYS1.MACLIB") == ["ABC"]
    with pytest.raises(NotADirectoryError):
        store.members("USER.DATA")
    with pytest.raises(FileNotFoundError):
        store.members("NOPE")


def test_store_open_read(store):
    with store.open("USER.DATA") as fh:
        assert fh.read() == b"sequential"
    with store.open("sys1.maclib", "ABC", "rb") as fh:
        assert fh.read() == b"member text"


def test_store_open_write_new_member_round_trip(store):
    with store.open("SYS1.MACLIB", "new", "wb") as fh:
        fh.write(b"payload")
    assert store.members("SYS1.MACLIB") == ["ABC", "NEW"]
    with store.open("SYS1.MACLIB", "NEW", "rb") as fh:
        assert fh.read() == b"payload"


def test_store_open_missing(store):
    with pytest.raises(FileNotFoundError):
        store.open("SYS1.MACLIB", "ZZZ", "rb")
    with pytest.raises(FileNotFoundError):
        store.open("NO.SUCH", None, "rb")
    with pytest.raises(IsADirectoryError):
        store.open("SYS1.MACLIB", None, "rb")