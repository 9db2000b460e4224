import unittest

from windwidget.main import app


class TestMain(unittest.TestCase):
    def test_app_title(self):
        self.assertEqual(app.title, "Wind Widget")

    def test_routes_mounted_under_v1(self):
        paths = {route.path for route in app.routes}
        self.assertIn("/v1/wind", paths)
        self.assertIn("/v1/health", paths)
        self.assertIn("/v1/widgets/refresh", paths)
        self.assertIn("/v1/widgets/{widget_id}/credentials", paths)


if __name__ == "__main__":
    unittest.main()
