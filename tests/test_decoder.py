import unittest

from io import BytesIO
from dataclasses import replace

from atmfjstc.lib.os_forensics.posix import PosixFileType

from ar_file import decode_ar_header, parse_ar_decimal_field, ArHeader, ArFormatErrorKind, ArTruncatedHeaderError, \
    ArBadHeaderTerminatorError, ArBadNumericFieldError, ArInvalidExtendedNameError

from ar_builder import make_header_record


DUB_SDL_RECORD = make_header_record('dub.sdl', mtime=1722788759, uid=0, gid=0, mode=b'100644', size=167)


class DecodeHeaderTest(unittest.TestCase):
    def test_plain_header(self):
        header = decode_ar_header(DUB_SDL_RECORD)

        self.assertEqual(header, ArHeader(
            name='dub.sdl',
            mtime=1722788759,
            owner_uid=0,
            group_gid=0,
            mode=b'100644  ',
            size=167,
            data_start=0,
        ))
        self.assertIsNone(header.header_offset)

    def test_numeric_fields(self):
        header = decode_ar_header(make_header_record('a.o', mtime=123456789012, uid=501, gid=20, size=4294967295))

        self.assertEqual(header.mtime, 123456789012)
        self.assertEqual(header.owner_uid, 501)
        self.assertEqual(header.group_gid, 20)
        self.assertEqual(header.size, 4294967295)

    def test_size_over_32_bits(self):
        with self.assertRaises(ArBadNumericFieldError) as cm:
            decode_ar_header(make_header_record('a.o', size=4294967296))

        self.assertEqual(cm.exception.field_name, 'size')
        self.assertEqual(cm.exception.max_value, 0xffffffff)
        self.assertIn('exceeds the maximum', str(cm.exception))

    def test_mtime_uses_all_12_digits(self):
        self.assertEqual(decode_ar_header(make_header_record('a.o', mtime=999999999999)).mtime, 999999999999)

    def test_mode_is_kept_raw(self):
        header = decode_ar_header(make_header_record('a.o', mode=b'garbage!'))

        self.assertEqual(header.mode, b'garbage!')
        self.assertIsNone(header.posix_mode)

    def test_trailing_data_is_ignored_for_plain_names(self):
        header = decode_ar_header(DUB_SDL_RECORD + b'#1/10 and then some')

        self.assertEqual(header.name, 'dub.sdl')
        self.assertEqual(header.data_start, 0)

    def test_long_name_fills_whole_field(self):
        header = decode_ar_header(make_header_record('sixteen_chars.o/'))

        self.assertEqual(header.name, 'sixteen_chars.o/')

    def test_blank_numeric_fields_read_as_zero(self):
        header = decode_ar_header(make_header_record('//', mtime=b'', uid=b'', gid=b'', mode=b'', size=46))

        self.assertEqual((header.mtime, header.owner_uid, header.group_gid, header.size), (0, 0, 0, 46))

    def test_truncated(self):
        with self.assertRaises(ArTruncatedHeaderError) as cm:
            decode_ar_header(DUB_SDL_RECORD[:59])

        self.assertEqual(cm.exception.kind, ArFormatErrorKind.TRUNCATED_HEADER)
        self.assertEqual(cm.exception.available, 59)

    def test_empty(self):
        with self.assertRaises(ArTruncatedHeaderError):
            decode_ar_header(b'')

    def test_bad_terminator(self):
        with self.assertRaises(ArBadHeaderTerminatorError) as cm:
            decode_ar_header(make_header_record('dub.sdl', size=167, terminator=b'`\r'))

        self.assertEqual(cm.exception.kind, ArFormatErrorKind.BAD_TERMINATOR)
        self.assertEqual(cm.exception.found, b'`\r')
        self.assertIn("bad header terminator", str(cm.exception))

    def test_bad_terminator_takes_precedence_over_bad_fields(self):
        with self.assertRaises(ArBadHeaderTerminatorError):
            decode_ar_header(make_header_record('dub.sdl', uid=b'xyz', terminator=b'\n`'))

    def test_bad_numeric_field(self):
        with self.assertRaises(ArBadNumericFieldError) as cm:
            decode_ar_header(make_header_record('dub.sdl', uid=b'12a'))

        self.assertEqual(cm.exception.kind, ArFormatErrorKind.BAD_NUMERIC_FIELD)
        self.assertEqual(cm.exception.field_name, 'owner ID')
        self.assertEqual(cm.exception.raw_value, b'12a   ')

    def test_bad_size_field(self):
        with self.assertRaises(ArBadNumericFieldError) as cm:
            decode_ar_header(make_header_record('dub.sdl', size=b'-5'))

        self.assertEqual(cm.exception.field_name, 'size')

    def test_direct_decode_errors_have_no_position(self):
        with self.assertRaises(ArBadNumericFieldError) as cm:
            decode_ar_header(make_header_record('dub.sdl', gid=b'1 2'))

        self.assertIsNone(cm.exception.position)
        self.assertNotIn("At position", str(cm.exception))


class DecodeBSDNameTest(unittest.TestCase):
    RECORD = make_header_record('#1/10', mtime=1722788759, size=15)
    DATA = b'dub.sdl\x00\x00\x00' + b'hello'

    def test_name_from_buffer(self):
        header = decode_ar_header(self.RECORD + self.DATA)

        self.assertEqual(header.name, 'dub.sdl')
        self.assertEqual(header.data_start, 10)
        self.assertEqual(header.size, 15)
        self.assertEqual(header.content_size, 5)
        self.assertTrue(header.has_extended_name)

    def test_name_via_read_following(self):
        stream = BytesIO(self.DATA)

        header = decode_ar_header(self.RECORD, read_following=stream.read)

        self.assertEqual(header.name, 'dub.sdl')
        self.assertEqual(header.data_start, 10)
        self.assertEqual(stream.tell(), 10)

    def test_name_as_long_as_block_minus_terminator(self):
        header = decode_ar_header(make_header_record('#1/8', size=8) + b'abcdefg\x00')

        self.assertEqual(header.name, 'abcdefg')

    def test_missing_terminator(self):
        with self.assertRaises(ArInvalidExtendedNameError) as cm:
            decode_ar_header(make_header_record('#1/8', size=8) + b'abcdefgh')

        self.assertEqual(cm.exception.kind, ArFormatErrorKind.INVALID_EXTENDED_NAME)
        self.assertIn("invalid extended name length", str(cm.exception))

    def test_truncated_name_block(self):
        with self.assertRaises(ArInvalidExtendedNameError):
            decode_ar_header(self.RECORD + b'dub.sd')

    def test_truncated_name_block_via_read_following(self):
        with self.assertRaises(ArInvalidExtendedNameError):
            decode_ar_header(self.RECORD, read_following=BytesIO(b'dub').read)

    def test_name_block_larger_than_member(self):
        with self.assertRaises(ArInvalidExtendedNameError):
            decode_ar_header(make_header_record('#1/20', size=10) + b'dub.sdl\x00' + b'\x00' * 12)

    def test_name_size_not_decimal(self):
        with self.assertRaises(ArInvalidExtendedNameError):
            decode_ar_header(make_header_record('#1/1a', size=30) + b'\x00' * 30)


class ParseDecimalFieldTest(unittest.TestCase):
    def test_padded(self):
        self.assertEqual(parse_ar_decimal_field(b'167       ', 'size'), 167)

    def test_blank(self):
        self.assertEqual(parse_ar_decimal_field(b'      ', 'owner ID'), 0)

    def test_rejects_sign(self):
        with self.assertRaises(ArBadNumericFieldError):
            parse_ar_decimal_field(b'+12   ', 'owner ID')

    def test_rejects_underscore(self):
        with self.assertRaises(ArBadNumericFieldError):
            parse_ar_decimal_field(b'1_000 ', 'owner ID')

    def test_rejects_inner_space(self):
        with self.assertRaises(ArBadNumericFieldError):
            parse_ar_decimal_field(b'1 000 ', 'owner ID')

    def test_max_value(self):
        self.assertEqual(parse_ar_decimal_field(b'65535 ', 'owner ID', max_value=65535), 65535)

        with self.assertRaises(ArBadNumericFieldError) as cm:
            parse_ar_decimal_field(b'65536 ', 'owner ID', max_value=65535)

        self.assertEqual(cm.exception.max_value, 65535)
        self.assertEqual(cm.exception.kind, ArFormatErrorKind.BAD_NUMERIC_FIELD)


class HeaderPropertiesTest(unittest.TestCase):
    def test_padded_size(self):
        self.assertEqual(decode_ar_header(make_header_record('a', size=167)).padded_size, 168)
        self.assertEqual(decode_ar_header(make_header_record('a', size=168)).padded_size, 168)
        self.assertEqual(decode_ar_header(make_header_record('a', size=0)).padded_size, 0)

    def test_data_offset(self):
        header = decode_ar_header(DUB_SDL_RECORD)

        self.assertIsNone(header.data_offset)
        self.assertEqual(replace(header, header_offset=8).data_offset, 68)

    def test_data_offset_skips_name_block(self):
        header = decode_ar_header(DecodeBSDNameTest.RECORD + DecodeBSDNameTest.DATA)

        self.assertEqual(replace(header, header_offset=8).data_offset, 78)

    def test_posix_mode(self):
        header = decode_ar_header(DUB_SDL_RECORD)

        self.assertEqual(header.posix_mode, 0o100644)
        self.assertEqual(header.posix_file_type, PosixFileType.FILE)
        self.assertEqual(int(header.posix_permissions), 0o644)

    def test_mtime_iso(self):
        self.assertEqual(decode_ar_header(DUB_SDL_RECORD).mtime_iso, '2024-08-04 16:25:59+00:00')

    def test_mtime_iso_past_year_9999(self):
        header = decode_ar_header(make_header_record('a.o', mtime=999999999999))

        self.assertIsNone(header.mtime_iso)


if __name__ == '__main__':
    unittest.main()
