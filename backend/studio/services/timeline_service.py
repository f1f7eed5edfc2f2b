"""
Timeline assembly and edit-decision export.

Shots are laid out in shot_index order at a fixed 30 fps. Shots without
selected media are left out of the video track, but their durations still
count towards the sequence length that the audio tracks span.
"""

import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID
from xml.sax.saxutils import escape

from sqlalchemy.ext.asyncio import AsyncSession

from studio.crud.project import project_crud
from studio.crud.shot import shot_crud
from studio.exceptions import NotFoundError
from studio.models import AspectRatio, Shot, VideoStatus
from studio.utils.logging import get_logger

logger = get_logger(__name__)

FRAME_RATE = 30

FRAME_SIZES: Dict[AspectRatio, Tuple[int, int]] = {
    AspectRatio.LANDSCAPE: (1920, 1080),
    AspectRatio.PORTRAIT: (1080, 1920),
}

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


@dataclass
class ShotMedia:
    """A shot reduced to what the timeline needs."""
    shot_index: int
    duration: float
    video_url: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def media_url(self) -> Optional[str]:
        return self.video_url or self.image_url

    @property
    def is_video(self) -> bool:
        return bool(self.video_url)


@dataclass
class TimelineClip:
    shot_index: int
    start: int
    end: int
    media_url: str
    is_video: bool

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def clip_id(self) -> str:
        return f"shot_{self.shot_index + 1}"

    @property
    def filename(self) -> str:
        extension = "mp4" if self.is_video else "png"
        return f"shot_{self.shot_index + 1:02d}.{extension}"


@dataclass
class Timeline:
    title: str
    width: int
    height: int
    total_frames: int
    clips: List[TimelineClip] = field(default_factory=list)
    narration_url: Optional[str] = None
    music_url: Optional[str] = None
    frame_rate: int = FRAME_RATE


def seconds_to_frames(seconds: float, frame_rate: int = FRAME_RATE) -> int:
    """Round half up, so 2.5 frames is 3 regardless of float representation."""
    frames = Decimal(str(seconds)) * frame_rate
    return int(frames.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def frames_to_timecode(frames: int, frame_rate: int = FRAME_RATE) -> str:
    """HH:MM:SS:FF non-drop-frame timecode."""
    total_seconds, remaining = divmod(frames, frame_rate)
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}:{remaining:02d}"


def escape_xml(text: str) -> str:
    """Escape markup characters and drop control characters XML 1.0 forbids."""
    return escape(_XML_ILLEGAL.sub("", text), _XML_ENTITIES)


def export_filename(title: str, extension: str) -> str:
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', title)}.{extension}"


def assemble_timeline(
    title: str,
    aspect_ratio: AspectRatio,
    shots: Sequence[ShotMedia],
    narration_url: Optional[str] = None,
    music_url: Optional[str] = None,
) -> Timeline:
    """
    Place every shot with selected media back to back from frame 0.

    total_frames sums every shot, placed or not.
    """
    width, height = FRAME_SIZES[AspectRatio(aspect_ratio)]
    ordered = sorted(shots, key=lambda s: s.shot_index)

    clips = []
    total_frames = 0
    cursor = 0
    for shot in ordered:
        frames = seconds_to_frames(shot.duration)
        total_frames += frames
        if not shot.media_url:
            continue
        clips.append(
            TimelineClip(
                shot_index=shot.shot_index,
                start=cursor,
                end=cursor + frames,
                media_url=shot.media_url,
                is_video=shot.is_video,
            )
        )
        cursor += frames

    return Timeline(
        title=title,
        width=width,
        height=height,
        total_frames=total_frames,
        clips=clips,
        narration_url=narration_url,
        music_url=music_url,
    )


def _rate(indent: str, frame_rate: int) -> str:
    return (
        f"{indent}<rate>\n"
        f"{indent}  <timebase>{frame_rate}</timebase>\n"
        f"{indent}  <ntsc>FALSE</ntsc>\n"
        f"{indent}</rate>"
    )


def _video_clip(clip: TimelineClip, timeline: Timeline) -> str:
    indent = " " * 14
    filename = escape_xml(clip.filename)
    return "\n".join([
        f'{indent}<clipitem id="{escape_xml(clip.clip_id)}">',
        f"{indent}  <name>Shot {clip.shot_index + 1}</name>",
        f"{indent}  <duration>{clip.duration}</duration>",
        _rate(indent + "  ", timeline.frame_rate),
        f"{indent}  <start>{clip.start}</start>",
        f"{indent}  <end>{clip.end}</end>",
        f"{indent}  <in>0</in>",
        f"{indent}  <out>{clip.duration}</out>",
        f'{indent}  <file id="file_{escape_xml(clip.clip_id)}">',
        f"{indent}    <name>{filename}</name>",
        f"{indent}    <pathurl>file://./videos/{filename}</pathurl>",
        _rate(indent + "    ", timeline.frame_rate),
        f"{indent}    <duration>{clip.duration}</duration>",
        f"{indent}    <media>",
        f"{indent}      <video>",
        f"{indent}        <samplecharacteristics>",
        f"{indent}          <width>{timeline.width}</width>",
        f"{indent}          <height>{timeline.height}</height>",
        f"{indent}        </samplecharacteristics>",
        f"{indent}      </video>",
        f"{indent}    </media>",
        f"{indent}  </file>",
        f"{indent}</clipitem>",
    ])


def _audio_track(track_id: str, name: str, filename: str, timeline: Timeline) -> str:
    indent = " " * 12
    total = timeline.total_frames
    filename = escape_xml(filename)
    return "\n".join([
        f"{indent}<track>",
        f'{indent}  <clipitem id="{track_id}">',
        f"{indent}    <name>{escape_xml(name)}</name>",
        f"{indent}    <duration>{total}</duration>",
        _rate(indent + "    ", timeline.frame_rate),
        f"{indent}    <start>0</start>",
        f"{indent}    <end>{total}</end>",
        f"{indent}    <in>0</in>",
        f"{indent}    <out>{total}</out>",
        f'{indent}    <file id="file_{track_id}">',
        f"{indent}      <name>{filename}</name>",
        f"{indent}      <pathurl>file://./audio/{filename}</pathurl>",
        f"{indent}      <media>",
        f"{indent}        <audio>",
        f"{indent}          <channelcount>2</channelcount>",
        f"{indent}        </audio>",
        f"{indent}      </media>",
        f"{indent}    </file>",
        f"{indent}  </clipitem>",
        f"{indent}</track>",
    ])


def render_premiere_xml(timeline: Timeline) -> str:
    """Render an FCP 7 / Premiere Pro xmeml v5 document."""
    title = escape_xml(timeline.title)
    rate = timeline.frame_rate

    clip_items = "\n".join(_video_clip(clip, timeline) for clip in timeline.clips)
    audio_tracks = []
    if timeline.narration_url:
        audio_tracks.append(_audio_track("narration", "Narration", "narration.mp3", timeline))
    if timeline.music_url:
        audio_tracks.append(_audio_track("music", "Music", "music.mp3", timeline))

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        "<!DOCTYPE xmeml>",
        '<xmeml version="5">',
        "  <project>",
        f"    <name>{title}</name>",
        "    <children>",
        '      <sequence id="main_sequence">',
        f"        <name>{title}</name>",
        f"        <duration>{timeline.total_frames}</duration>",
        _rate(" " * 8, rate),
        "        <timecode>",
        _rate(" " * 10, rate),
        "          <string>00:00:00:00</string>",
        "          <frame>0</frame>",
        "          <displayformat>NDF</displayformat>",
        "        </timecode>",
        "        <media>",
        "          <video>",
        "            <format>",
        "              <samplecharacteristics>",
        f"                <width>{timeline.width}</width>",
        f"                <height>{timeline.height}</height>",
        "                <anamorphic>FALSE</anamorphic>",
        "                <pixelaspectratio>square</pixelaspectratio>",
        "                <fielddominance>none</fielddominance>",
        _rate(" " * 16, rate),
        "              </samplecharacteristics>",
        "            </format>",
        "            <track>",
    ]
    if clip_items:
        lines.append(clip_items)
    lines += [
        "            </track>",
        "          </video>",
        "          <audio>",
        "            <numOutputChannels>2</numOutputChannels>",
        "            <format>",
        "              <samplecharacteristics>",
        "                <depth>16</depth>",
        "                <samplerate>48000</samplerate>",
        "              </samplecharacteristics>",
        "            </format>",
    ]
    lines += audio_tracks
    lines += [
        "          </audio>",
        "        </media>",
        "      </sequence>",
        "    </children>",
        "  </project>",
        "</xmeml>",
        "",
    ]
    return "\n".join(lines)


def render_edl(timeline: Timeline) -> str:
    """Render a CMX 3600 style edit decision list of the video track."""
    lines = [f"TITLE: {timeline.title}", "FCM: NON-DROP FRAME", ""]
    for event, clip in enumerate(timeline.clips, start=1):
        start = frames_to_timecode(clip.start, timeline.frame_rate)
        end = frames_to_timecode(clip.end, timeline.frame_rate)
        lines.append(f"{event:03d}  001      V     C        {start} {end} {start} {end}")
        lines.append(f"* FROM CLIP NAME: {clip.filename}")
        lines.append("")
    return "\n".join(lines)


def shot_media(shot: Shot) -> ShotMedia:
    """Pick a shot's selected completed video and selected image."""
    video = next(
        (
            v for v in shot.videos
            if v.selected and v.status == VideoStatus.COMPLETED and v.video_url
        ),
        None,
    )
    image = next((i for i in shot.images if i.selected), None)
    return ShotMedia(
        shot_index=shot.shot_index,
        duration=float(shot.duration),
        video_url=video.video_url if video else None,
        image_url=image.image_url if image else None,
    )


class TimelineService:
    async def build(self, session: AsyncSession, project_id: UUID) -> Timeline:
        project = await project_crud.get_by_id(session, project_id)
        if not project:
            raise NotFoundError("Project", project_id)

        shots = await shot_crud.list_by_project(session, project_id, with_media=True)
        audio = await project_crud.get_audio(session, project_id)

        timeline = assemble_timeline(
            title=project.title,
            aspect_ratio=project.aspect_ratio,
            shots=[shot_media(shot) for shot in shots],
            narration_url=audio.narration_url if audio else None,
            music_url=audio.music_url if audio else None,
        )
        logger.info(
            "Timeline assembled",
            project_id=str(project_id),
            shots=len(shots),
            clips=len(timeline.clips),
            total_frames=timeline.total_frames,
        )
        return timeline


timeline_service = TimelineService()
