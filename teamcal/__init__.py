# teamcal/__init__.py
"""
Team calendar service.

Пакет собирается из ``teamcal.main:app``; всё остальное импортируется
по полным путям (``teamcal.core.<domain>.service`` и т. д.).
"""
