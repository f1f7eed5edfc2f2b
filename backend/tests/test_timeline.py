"""
Tests for timeline assembly and the XML / EDL renderers.
"""

import xml.etree.ElementTree as ET

import pytest

from studio.models import AspectRatio, VideoStatus
from studio.services.timeline_service import (
    ShotMedia,
    TimelineService,
    assemble_timeline,
    escape_xml,
    export_filename,
    frames_to_timecode,
    render_edl,
    render_premiere_xml,
    seconds_to_frames,
)
from tests.factories import make_image, make_project, make_shots, make_video


def media(index, duration, video=True, image=False):
    return ShotMedia(
        shot_index=index,
        duration=duration,
        video_url=f"https://cdn.test/{index}.mp4" if video else None,
        image_url=f"https://cdn.test/{index}.png" if image else None,
    )


def clip_frames(timeline):
    return [(clip.start, clip.end) for clip in timeline.clips]


# ============================================================================
# Frame math
# ============================================================================


def test_clips_are_contiguous_from_zero():
    timeline = assemble_timeline(
        "Exodus", AspectRatio.LANDSCAPE, [media(0, 4.0), media(1, 2.5), media(2, 6.0)]
    )

    assert clip_frames(timeline) == [(0, 120), (120, 195), (195, 375)]
    assert timeline.total_frames == 375


def test_clips_follow_shot_index_not_input_order():
    timeline = assemble_timeline(
        "Exodus", AspectRatio.LANDSCAPE, [media(2, 6.0), media(0, 4.0), media(1, 2.5)]
    )

    assert [clip.shot_index for clip in timeline.clips] == [0, 1, 2]
    assert clip_frames(timeline) == [(0, 120), (120, 195), (195, 375)]


def test_shot_without_media_is_skipped_but_counted_in_total():
    timeline = assemble_timeline(
        "Exodus",
        AspectRatio.LANDSCAPE,
        [media(0, 4.0), media(1, 2.0, video=False), media(2, 3.0)],
        narration_url="https://cdn.test/n.mp3",
    )

    assert [clip.shot_index for clip in timeline.clips] == [0, 2]
    assert clip_frames(timeline) == [(0, 120), (120, 210)]
    assert timeline.total_frames == 270


def test_image_is_used_when_no_video_selected():
    timeline = assemble_timeline("T", AspectRatio.LANDSCAPE, [media(0, 1.0, video=False, image=True)])

    (clip,) = timeline.clips
    assert clip.is_video is False
    assert clip.filename == "shot_01.png"


def test_half_frames_round_up():
    assert seconds_to_frames(0.05) == 2
    assert seconds_to_frames(2.5) == 75
    assert seconds_to_frames(0.25) == 8


def test_frame_size_follows_aspect_ratio():
    landscape = assemble_timeline("T", AspectRatio.LANDSCAPE, [])
    portrait = assemble_timeline("T", AspectRatio.PORTRAIT, [])

    assert (landscape.width, landscape.height) == (1920, 1080)
    assert (portrait.width, portrait.height) == (1080, 1920)


def test_timecode_formatting():
    assert frames_to_timecode(0) == "00:00:00:00"
    assert frames_to_timecode(195) == "00:00:06:15"
    assert frames_to_timecode(30 * 3661 + 7) == "01:01:01:07"


# ============================================================================
# Premiere XML
# ============================================================================


def test_xml_parses_and_carries_clip_frames():
    timeline = assemble_timeline(
        "Exodus", AspectRatio.LANDSCAPE, [media(0, 4.0), media(1, 2.5), media(2, 6.0)]
    )

    root = ET.fromstring(render_premiere_xml(timeline).encode("utf-8"))

    assert root.tag == "xmeml"
    assert root.get("version") == "5"
    clips = root.findall("./project/children/sequence/media/video/track/clipitem")
    assert [c.get("id") for c in clips] == ["shot_1", "shot_2", "shot_3"]
    assert [(int(c.findtext("start")), int(c.findtext("end"))) for c in clips] == [
        (0, 120), (120, 195), (195, 375)
    ]
    assert clips[0].findtext("file/pathurl") == "file://./videos/shot_01.mp4"
    assert root.findtext("./project/children/sequence/duration") == "375"


def test_xml_escapes_title():
    title = "Tom & Jerry's <\"Great\"> Escape"
    timeline = assemble_timeline(title, AspectRatio.LANDSCAPE, [media(0, 1.0)])

    document = render_premiere_xml(timeline)

    assert "&amp;" in document
    assert "&apos;" in document
    assert "&lt;" in document and "&gt;" in document
    assert "&quot;" in document
    assert title not in document
    root = ET.fromstring(document.encode("utf-8"))
    assert root.findtext("./project/name") == title


def test_xml_drops_control_characters_from_names():
    timeline = assemble_timeline("Genesis\x0b Part\x00 1\x1f", AspectRatio.LANDSCAPE, [media(0, 1.0)])

    document = render_premiere_xml(timeline)

    root = ET.fromstring(document.encode("utf-8"))
    assert root.findtext("./project/name") == "Genesis Part 1"
    assert escape_xml("tab\tand\nnewline") == "tab\tand\nnewline"


def test_audio_tracks_span_full_total():
    timeline = assemble_timeline(
        "T",
        AspectRatio.LANDSCAPE,
        [media(0, 4.0), media(1, 2.0, video=False)],
        narration_url="https://cdn.test/n.mp3",
        music_url="https://cdn.test/m.mp3",
    )

    root = ET.fromstring(render_premiere_xml(timeline).encode("utf-8"))
    audio_clips = root.findall("./project/children/sequence/media/audio/track/clipitem")

    assert [c.get("id") for c in audio_clips] == ["narration", "music"]
    for clip in audio_clips:
        assert clip.findtext("start") == "0"
        assert clip.findtext("end") == "180"
    video_clips = root.findall("./project/children/sequence/media/video/track/clipitem")
    assert video_clips[-1].findtext("end") == "120"


def test_empty_project_renders_valid_document():
    timeline = assemble_timeline("Empty", AspectRatio.PORTRAIT, [])

    root = ET.fromstring(render_premiere_xml(timeline).encode("utf-8"))

    assert root.findall("./project/children/sequence/media/video/track/clipitem") == []
    assert root.findtext("./project/children/sequence/duration") == "0"
    assert root.findall("./project/children/sequence/media/audio/track") == []


# ============================================================================
# EDL and filenames
# ============================================================================


def test_edl_lists_placed_clips():
    timeline = assemble_timeline("Exodus", AspectRatio.LANDSCAPE, [media(0, 4.0), media(1, 2.5)])

    edl = render_edl(timeline)

    assert edl.startswith("TITLE: Exodus\nFCM: NON-DROP FRAME\n")
    assert "001  001      V     C        00:00:00:00 00:00:04:00 00:00:00:00 00:00:04:00" in edl
    assert "* FROM CLIP NAME: shot_02.mp4" in edl


def test_export_filename_replaces_non_alphanumerics():
    assert export_filename("Tom & Jerry's", "xml") == "Tom___Jerry_s.xml"


# ============================================================================
# Loading from the database
# ============================================================================


@pytest.mark.asyncio
async def test_build_uses_selected_completed_media(session):
    project = await make_project(session, title="Genesis")
    first, second, third = await make_shots(session, project, [4.0, 2.5, 6.0])
    await make_video(session, first, selected=True, video_url="https://cdn.test/first.mp4")
    await make_image(session, second, selected=True, image_url="https://cdn.test/second.png")
    await make_video(session, second, status=VideoStatus.PROCESSING, provider_task_id="t1")
    await make_image(session, third)

    timeline = await TimelineService().build(session, project.id)

    assert timeline.title == "Genesis"
    assert [(c.shot_index, c.is_video) for c in timeline.clips] == [(0, True), (1, False)]
    assert clip_frames(timeline) == [(0, 120), (120, 195)]
    assert timeline.total_frames == 375
