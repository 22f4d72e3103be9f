"""
Tests for recording filename tokenization.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / 'tools'))

from filename_tokenizer import (
    DecodeError, FilenameTokens, UnrecognizedFormat, tokenize,
)
from recording_schema import DeviceFamily


class TestCameraFilenames:

    def test_camera_with_path(self, sample_filenames):
        tokens = tokenize(sample_filenames['camera_v1'])
        assert tokens == FilenameTokens(
            name='RecM01_20201222_075939_080140_6D28808_1A468F9',
            version=1,
            device_family=DeviceFamily.CAMERA,
            start_date='20201222',
            start_time='075939',
            end_time='080140',
            payload_hex='6D28808',
            file_size_token='1A468F9',
        )

    def test_dst_prefix_passed_through(self, sample_filenames):
        tokens = tokenize(sample_filenames['camera_v2'])
        assert tokens.version == 2
        assert tokens.start_date == 'DST20230426'
        assert tokens.payload_hex == '2B14808'

    def test_without_extension(self):
        tokens = tokenize('RecS03_20230101_000000_000010_6D28808_FF')
        assert tokens.version == 3
        assert tokens.file_size_token == 'FF'

    def test_camera_has_no_hub_tokens(self, sample_filenames):
        tokens = tokenize(sample_filenames['camera_v1'])
        assert tokens.category is None
        assert tokens.width is None
        assert tokens.height is None
        assert 'category' not in tokens.to_dict()

    def test_windows_path(self):
        tokens = tokenize('C:\\NVR\\Mp4Record\\RecM01_20201222_075939_080140_6D28808_1A468F9.mp4')
        assert tokens.name == 'RecM01_20201222_075939_080140_6D28808_1A468F9'
        assert tokens.version == 1
        assert tokens.payload_hex == '6D28808'


class TestLenientTokens:

    def test_non_digit_version_is_none(self):
        tokens = tokenize('RecM0X_20201222_075939_080140_6D28808_1A468F9.mp4')
        assert tokens.version is None
        assert tokens.device_family == DeviceFamily.CAMERA
        assert tokens.to_dict()['version'] is None

    def test_unicode_digit_version_is_none(self):
        assert tokenize('RecM0\u0663_20201222_075939_080140_6D28808_1A468F9.mp4').version is None

    @pytest.mark.parametrize("payload", ['NOTHEX', 'ZZZZZZZ', ''])
    def test_payload_kept_verbatim(self, payload):
        tokens = tokenize(f'RecM01_20201222_075939_080140_{payload}_1A468F9.mp4')
        assert tokens.payload_hex == payload
        assert tokens.version == 1


class TestHubFilenames:

    def test_hub_layout(self, sample_filenames):
        tokens = tokenize(sample_filenames['hub_v2'])
        assert tokens.device_family == DeviceFamily.HUB
        assert tokens.version == 2
        assert tokens.start_date == 'DST20240827'
        assert tokens.start_time == '090302'
        assert tokens.end_time == '090334'
        assert tokens.payload_hex == '033C820000'
        assert tokens.file_size_token == '61B6F0'

    def test_hub_unused_tokens_kept(self, sample_filenames):
        tokens = tokenize(sample_filenames['hub_v2'])
        assert (tokens.category, tokens.width, tokens.height) == ('0', '800', '800')
        data = tokens.to_dict()
        assert data['device_family'] == 'hub'
        assert data['width'] == '800'

    def test_payload_is_eighth_token(self):
        name = 'RecM05_d_s_e_c_w_h_ABCDEF_123'
        tokens = tokenize(name)
        assert tokens.device_family == DeviceFamily.HUB
        assert tokens.payload_hex == 'ABCDEF'
        assert tokens.file_size_token == '123'


class TestFileSize:

    def test_hex_file_size(self, sample_filenames):
        tokens = tokenize(sample_filenames['camera_v1'])
        assert tokens.file_size == 0x1A468F9

    def test_non_hex_file_size(self):
        tokens = tokenize('RecM02_20230101_000000_000010_6D28808_size.mp4')
        assert tokens.file_size_token == 'size'
        assert tokens.file_size is None


class TestMalformedFilenames:

    @pytest.mark.parametrize("filename", [
        'randomfile.mp4',
        'Rec.mp4',
        'RecM01_a_b_c_d_e_f.mp4',
        'RecM01_20201222_075939_080140_6D28808.mp4',
        'RecM001_20201222_075939_080140_6D28808_1A468F9.mp4',
        'recM01_20201222_075939_080140_6D28808_1A468F9.mp4',
        '',
        'Mp4Record/2020-12-22/',
    ])
    def test_unrecognized(self, filename):
        with pytest.raises(UnrecognizedFormat):
            tokenize(filename)

    def test_error_carries_filename(self):
        with pytest.raises(UnrecognizedFormat) as exc_info:
            tokenize('dir/randomfile.mp4')
        assert exc_info.value.filename == 'dir/randomfile.mp4'
        assert 'could not find version' in exc_info.value.reason

    def test_token_count_reason(self):
        with pytest.raises(UnrecognizedFormat, match='unknown length 7'):
            tokenize('RecM01_a_b_c_d_e_f.mp4')

    def test_error_hierarchy(self):
        assert issubclass(UnrecognizedFormat, DecodeError)
        assert issubclass(DecodeError, ValueError)
