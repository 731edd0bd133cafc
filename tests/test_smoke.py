"""冒烟测试：验证测试脚手架正常工作。"""

import unittest


class SmokeTest(unittest.TestCase):
    """基本的冒烟测试。"""

    def test_true(self):
        """验证测试框架可以运行。"""
        self.assertTrue(True)

    def test_import(self):
        """验证 home_interpreter 与 command_parser 包可以导入。"""
        import command_parser
        import home_interpreter

        self.assertIsNotNone(home_interpreter)
        self.assertIsNotNone(command_parser)
        self.assertIn("handle_query", home_interpreter.__all__)
        self.assertIn("parse_with_llm", command_parser.__all__)


if __name__ == "__main__":
    unittest.main()
