import datetime as dt
from pathlib import Path

import pytest

from gpsclimb.analyze import gpx_analyze
from gpsclimb.analyze.track import analyze_track
from gpsclimb.errors import InvalidGpxError
from gpsclimb.formats.gpx import extract_trackpoints, read_gpx, read_track


def test_analyze_sample_gpx(sample_gpx_path):
    stats = analyze_track(sample_gpx_path)

    assert stats["title"] == "Hill repeat"
    assert stats["points"] == 21
    assert stats["distance_m"] == pytest.approx(222.39, abs=0.05)
    assert stats["elevation_gain_m"] == pytest.approx(20.0)
    assert stats["climbs"] == 1
    assert stats["climb_elevation_m"] == pytest.approx(20.0)
    assert stats["grade_segments"] >= 2
    assert stats["max_grade"] > 0.03

    (climb,) = stats["climb_list"]
    assert climb.start == pytest.approx(111.19, abs=0.05)
    assert climb.end == pytest.approx(stats["distance_m"])


def test_read_track_metadata(sample_gpx_path):
    track = read_track(sample_gpx_path)

    assert track.title == "Hill repeat"
    assert track.description == "Flat approach, then a steady climb"
    assert track.keywords == ("hill", "test")
    assert isinstance(track.points, tuple)
    assert track.date == dt.datetime(2025, 4, 26, 8, 0, tzinfo=dt.timezone.utc)
    assert track.points[0].time == track.date
    assert track.points[0].power is None
    assert track.points[-1].power == 220.0
    assert track.points[-1].elevation == 520.0


def test_route_points_without_elevation(tmp_path: Path):
    gpx = tmp_path / "route.gpx"
    gpx.write_text(
        '<gpx xmlns="http://www.topografix.com/GPX/1/0" version="1.0">'
        "<rte><name>Route</name>"
        '<rtept lat="51.0" lon="12.0"/>'
        '<rtept lat="51.001" lon="12.0"><ele>5</ele></rtept>'
        "</rte></gpx>",
        encoding="utf-8",
    )

    points = extract_trackpoints(read_gpx(gpx))

    assert [p.elevation for p in points] == [0.0, 5.0]
    assert all(p.time is None for p in points)
    assert read_track(gpx).title == "route"


def test_invalid_xml(tmp_path: Path):
    bad = tmp_path / "bad.gpx"
    bad.write_text("<gpx><trk>", encoding="utf-8")

    with pytest.raises(InvalidGpxError):
        read_track(bad)


def test_point_without_coordinates(tmp_path: Path):
    bad = tmp_path / "nolat.gpx"
    bad.write_text('<gpx xmlns="http://www.topografix.com/GPX/1/1"><trk><trkseg>'
                   '<trkpt lon="1.0"/></trkseg></trk></gpx>', encoding="utf-8")

    with pytest.raises(InvalidGpxError):
        read_track(bad)


def test_main_tsv(sample_gpx_path, clean_env, tmp_path, capsys):
    clean_env.setenv("HOME", str(tmp_path))

    rc = gpx_analyze.main([str(sample_gpx_path), "--tsv"])

    out = capsys.readouterr().out.splitlines()
    assert rc == 0
    assert out[0] == gpx_analyze.TSV_HEADER
    fields = out[1].split("\t")
    assert fields[0] == str(sample_gpx_path)
    assert fields[1] == "21"
    assert fields[6] == "1"


def test_main_flags_override_config(sample_gpx_path, clean_env, tmp_path, capsys):
    clean_env.setenv("HOME", str(tmp_path))
    clean_env.setenv("GPSCLIMB_CLIMB_MINIMUM_GRADE", "0.5")

    gpx_analyze.main([str(sample_gpx_path), "--tsv"])
    assert capsys.readouterr().out.splitlines()[1].split("\t")[6] == "0"

    gpx_analyze.main([str(sample_gpx_path), "--tsv", "--minimum-grade", "0.03"])
    assert capsys.readouterr().out.splitlines()[1].split("\t")[6] == "1"


def test_main_report_lists_climbs(sample_gpx_path, clean_env, tmp_path, capsys):
    clean_env.setenv("HOME", str(tmp_path))

    gpx_analyze.main([str(sample_gpx_path), "--climbs"])

    out = capsys.readouterr().out
    assert "Hill repeat" in out
    assert "climbs             : 1" in out
    assert "score" in out


def test_main_reports_broken_files(tmp_path, clean_env, capsys):
    clean_env.setenv("HOME", str(tmp_path))
    bad = tmp_path / "bad.gpx"
    bad.write_text("not xml", encoding="utf-8")

    assert gpx_analyze.main([str(bad)]) == 1
    assert "Failed" in capsys.readouterr().err


def test_main_uses_fzf_without_arguments(sample_gpx_path, clean_env, tmp_path, monkeypatch, capsys):
    clean_env.setenv("HOME", str(tmp_path))
    picked = []

    def fake_select(paths, *, header, multi):
        picked.extend(paths)
        return [sample_gpx_path]

    monkeypatch.setattr(gpx_analyze, "fzf_select_paths", fake_select)

    rc = gpx_analyze.main(["--root", str(sample_gpx_path.parent), "--tsv"])

    assert rc == 0
    assert picked == [sample_gpx_path]
    assert len(capsys.readouterr().out.splitlines()) == 2


def test_main_precise_distance(sample_gpx_path, clean_env, tmp_path, capsys):
    clean_env.setenv("HOME", str(tmp_path))

    assert gpx_analyze.main([str(sample_gpx_path), "--precise"]) == 0

    out = capsys.readouterr().out
    line = next(row for row in out.splitlines() if "precise dist." in row)
    assert float(line.rsplit(":", 1)[1]) == pytest.approx(222.39, abs=1.0)


def test_main_precise_distance_not_converging(sample_gpx_path, clean_env, tmp_path, capsys):
    clean_env.setenv("HOME", str(tmp_path))
    clean_env.setenv("GPSCLIMB_VINCENTY_MAX_ITERATIONS", "0")

    assert gpx_analyze.main([str(sample_gpx_path), "--precise"]) == 1
    assert "did not converge" in capsys.readouterr().err
