# exam_logistics/services/__init__.py
