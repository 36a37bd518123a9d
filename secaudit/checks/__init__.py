"""
Shipped security checks, grouped by report.

Contains:
- StaticAnalysisCheck - bandit по исходникам (code)
- SecureCookiesCheck - флаги сессионных cookie (configuration)
- LockedDependenciesCheck, VulnerableDependenciesCheck - pip check / pip-audit (dependencies)
- InsecurePasswordsCheck, InsecureRuntimeConfigCheck - секреты и окружение (environment)
- FilePermissionCheck - права доступа (filesystem)
- ForbiddenFileAccessCheck - какие файлы проекта отдаёт сервер (webserver)
- SecureHeadersCheck - заголовки ответа (webserver)
"""
