# index_scout/report.py

"""
Генерация JSON-отчёта о запуске IndexScout.

Сериализация объекта RunReport в файл.
"""
import json
from pathlib import Path

from index_scout.engine import RunReport


def render_json(report: RunReport, output_path: Path | str) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект RunReport с результатами запуска
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    submission = report.submission
    data = {
        'target': report.target,
        'site_url': report.site_url,
        'sitemaps': report.sitemaps,
        'statuses': {status: urls for status, urls in report.buckets.items()},
        'indexable': report.indexable,
        'submission': {url: outcome.value for url, outcome in submission.outcomes.items()},
        'rate_limit': submission.rate_limit.kind if submission.rate_limit else None,
    }

    with output.open('w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return output
