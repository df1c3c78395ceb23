"""
Disiplin Kurulu: school discipline case management.

Students, incidents, board decisions and the regulation documents the
Öğrenci Davranışlarını Değerlendirme Kurulu issues.
"""

__version__ = "1.0.0"
