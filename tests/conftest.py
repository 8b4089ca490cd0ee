"""Shared fixtures for streamswitch tests."""

from unittest.mock import MagicMock

import pytest

STATS_XML = """<?xml version="1.0" encoding="utf-8" ?>
<rtmp>
  <nginx_version>1.25.3</nginx_version>
  <uptime>3600</uptime>
  <server>
    <application>
      <name>live</name>
      <live>
        <stream>
          <name>cam1</name>
          <time>120000</time>
          <bw_in>2200000</bw_in>
          <bw_video>2048000</bw_video>
          <bw_audio>131072</bw_audio>
          <client>
            <id>7</id>
            <address>10.0.0.2</address>
            <publishing/>
            <active/>
          </client>
          <meta>
            <video>
              <width>1920</width>
              <height>1080</height>
              <frame_rate>30</frame_rate>
              <codec>H264</codec>
              <profile>High</profile>
              <compat>0</compat>
              <level>4.1</level>
            </video>
            <audio>
              <codec>AAC</codec>
              <profile>LC</profile>
              <channels>2</channels>
              <sample_rate>48000</sample_rate>
            </audio>
          </meta>
          <nclients>1</nclients>
          <publishing/>
          <active/>
        </stream>
        <stream>
          <name>cam2</name>
          <bw_video>512000</bw_video>
        </stream>
        <nclients>2</nclients>
      </live>
    </application>
    <application>
      <name>other</name>
      <live>
        <stream>
          <name>cam1</name>
          <bw_video>0</bw_video>
        </stream>
        <stream>
          <name>cam2</name>
          <bw_video>99999</bw_video>
        </stream>
      </live>
    </application>
  </server>
</rtmp>
"""


def stats_with_bitrate(bw_video: int) -> str:
    """Stats page listing a single live/cam1 stream with the given bandwidth."""
    return f"""<rtmp><server><application><name>live</name><live>
<stream><name>cam1</name><bw_video>{bw_video}</bw_video></stream>
</live></application></server></rtmp>"""


def make_response(text: str = STATS_XML, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


@pytest.fixture
def stats_xml() -> str:
    return STATS_XML
