import unittest

from screensort.features.recognition.models import BoundingBox, TextObservation, reading_order, reading_order_text
from screensort.features.recognition.tesseract_recognizer import TesseractRecognizer


def _obs(text, y, confidence=0.9):
    return TextObservation(text=text, confidence=confidence, bounding_box=BoundingBox(y=y))


class TestObservationModels(unittest.TestCase):

    def test_confidence_is_clamped(self):
        self.assertEqual(TextObservation(text="a", confidence=1.7).confidence, 1.0)
        self.assertEqual(TextObservation(text="a", confidence=-0.2).confidence, 0.0)

    def test_reading_order_is_top_of_screen_first(self):
        obs = [_obs("bottom", 0.1), _obs("top", 0.9), _obs("middle", 0.5)]
        self.assertEqual([o.text for o in reading_order(obs)], ["top", "middle", "bottom"])
        self.assertEqual(reading_order_text(obs), "top\nmiddle\nbottom")

    def test_observations_are_immutable(self):
        obs = _obs("x", 0.5)
        with self.assertRaises(Exception):
            obs.text = "y"


class TestTesseractLineGrouping(unittest.TestCase):

    def setUp(self):
        self.recognizer = TesseractRecognizer()
        # Two words on line 1 near the top, one word on line 2 near the bottom,
        # plus a non-text block (conf -1) that must be ignored.
        self.data = {
            "text": ["Bohemian", "Rhapsody", "", "Queen"],
            "conf": ["90", "80", "-1", "70"],
            "block_num": [1, 1, 1, 2],
            "par_num": [1, 1, 1, 1],
            "line_num": [1, 1, 1, 1],
            "left": [10, 60, 0, 10],
            "top": [10, 10, 0, 80],
            "width": [40, 40, 100, 30],
            "height": [10, 10, 100, 10],
        }

    def test_words_grouped_into_lines(self):
        obs = self.recognizer.observations_from_data(self.data, 100, 100)
        self.assertEqual([o.text for o in obs], ["Bohemian Rhapsody", "Queen"])
        self.assertAlmostEqual(obs[0].confidence, 0.85)
        self.assertAlmostEqual(obs[1].confidence, 0.7)

    def test_boxes_use_bottom_left_origin(self):
        top_line, bottom_line = self.recognizer.observations_from_data(self.data, 100, 100)
        self.assertAlmostEqual(top_line.bounding_box.y, 0.8)
        self.assertAlmostEqual(bottom_line.bounding_box.y, 0.1)
        self.assertAlmostEqual(top_line.bounding_box.width, 0.9)
        self.assertEqual(reading_order_text([bottom_line, top_line]), "Bohemian Rhapsody\nQueen")

    def test_min_confidence_filters_lines(self):
        recognizer = TesseractRecognizer(min_confidence=0.8)
        obs = recognizer.observations_from_data(self.data, 100, 100)
        self.assertEqual([o.text for o in obs], ["Bohemian Rhapsody"])

    def test_zero_sized_image_yields_nothing(self):
        self.assertEqual(self.recognizer.observations_from_data(self.data, 0, 100), [])


if __name__ == '__main__':
    unittest.main()
