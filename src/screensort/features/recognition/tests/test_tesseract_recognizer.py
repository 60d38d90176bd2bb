import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from PIL import Image
import pytesseract

from screensort.core.exceptions import InvalidImageError, NoTextFoundError, RecognitionFailedError
from screensort.features.recognition.tesseract_recognizer import TesseractRecognizer

EMPTY_DATA = {"text": [], "conf": [], "block_num": [], "par_num": [], "line_num": [],
              "left": [], "top": [], "width": [], "height": []}

ONE_WORD_DATA = {"text": ["Hello"], "conf": ["95"], "block_num": [1], "par_num": [1], "line_num": [1],
                 "left": [0], "top": [0], "width": [10], "height": [5]}


class TestTesseractRecognizer(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.image_path = Path(self.tmp.name) / "shot.png"
        Image.new("RGB", (20, 10), "white").save(self.image_path)
        self.recognizer = TesseractRecognizer()

    def tearDown(self):
        self.tmp.cleanup()

    async def test_recognize_returns_observations(self):
        with patch("pytesseract.image_to_data", return_value=ONE_WORD_DATA):
            obs = await self.recognizer.recognize(self.image_path)
        self.assertEqual([o.text for o in obs], ["Hello"])

    async def test_no_text_raises(self):
        with patch("pytesseract.image_to_data", return_value=EMPTY_DATA):
            with self.assertRaises(NoTextFoundError):
                await self.recognizer.recognize(self.image_path)

    async def test_unreadable_file_is_invalid_image(self):
        bogus = Path(self.tmp.name) / "not-an-image.png"
        bogus.write_text("definitely not a png")
        with self.assertRaises(InvalidImageError):
            await self.recognizer.recognize(bogus)

    async def test_missing_tesseract_is_recognition_failure(self):
        with patch("pytesseract.image_to_data", side_effect=pytesseract.TesseractNotFoundError()):
            with self.assertRaises(RecognitionFailedError):
                await self.recognizer.recognize(self.image_path)

    def test_errors_are_retryable_except_invalid_image(self):
        self.assertFalse(InvalidImageError("x").is_retryable)
        self.assertTrue(NoTextFoundError("x").is_retryable)


if __name__ == '__main__':
    unittest.main()
