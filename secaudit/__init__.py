"""
secaudit - security audit for Python applications

Проверяет проект и его окружение на типичные проблемы безопасности:
- Статический анализ кода (bandit)
- Конфигурация сессий и секретов приложения
- Установленные зависимости (pip check, pip-audit)
- Переменные окружения интерпретатора
- Права доступа к файлам проекта
- Заголовки безопасности веб-сервера

Usage:
    secaudit audit prod
"""

__version__ = "1.0.0"
