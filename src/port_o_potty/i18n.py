"""Minimal translation helpers for GUI text."""
from __future__ import annotations

from typing import Dict

from PySide6.QtCore import QLocale

from .models import ErrorRecord

Translations = Dict[str, str]


_TRANSLATIONS: Dict[str, Translations] = {
    "en": {
        "error_action_label": "Action",
        "window_title": "Port-o-Potty",
        "subtitle": "Shows listeners in your configured port ranges.",
        "state_active": "Active",
        "state_paused": "Paused",
        "refresh_interval": "Refresh: {seconds}s",
        "ranges_title": "Port Ranges",
        "range_to": "to",
        "add_range": "Add range",
        "refresh_now": "Refresh now",
        "refreshing": "Refreshing…",
        "watching": "Watching: {ranges}",
        "ranges_empty": "Add at least one port range.",
        "table_range": "Range",
        "remove": "Remove",
        "listeners_title": "Listeners",
        "listeners_empty": "No listeners found in these ranges.",
        "listeners_scanning": "Scanning…",
        "table_port": "Port",
        "table_process": "Process",
        "table_pid": "PID",
        "table_started": "Started",
        "kill": "Kill",
        "kill_confirm_title": "Kill process",
        "kill_confirm_body": "Kill PID {pid}?",
        "tray_show": "Show",
        "tray_quit": "Quit",
        "config_error_title": "Configuration Error",
        "config_error_body": (
            "Failed to load configuration file.\n{detail}\n"
            "Delete or fix port-o-potty.config.yaml and retry."
        ),
        "error.scan_failed.message": "Listing listeners failed: {detail}.",
        "error.scan_failed.action": "The last known listeners are still shown; refresh to retry.",
        "error.kill_failed.message": "Could not kill PID {pid}: {detail}.",
        "error.kill_failed.action": "Check that the process still exists and that you own it.",
        "error.invalid_pid.message": "PID {pid} cannot be killed.",
        "error.invalid_pid.action": "Pick a listener owned by a regular process.",
        "error.ranges_not_saved.message": "Port ranges could not be saved: {detail}.",
        "error.ranges_not_saved.action": "Check permissions on the ranges file; changes are lost on exit.",
    },
    "ja": {
        "error_action_label": "対処",
        "subtitle": "設定したポート範囲で待ち受けているプロセスを表示します。",
        "state_active": "監視中",
        "state_paused": "一時停止",
        "refresh_interval": "更新間隔: {seconds}秒",
        "ranges_title": "ポート範囲",
        "range_to": "〜",
        "add_range": "範囲を追加",
        "refresh_now": "今すぐ更新",
        "refreshing": "更新中…",
        "watching": "監視対象: {ranges}",
        "ranges_empty": "ポート範囲を 1 つ以上追加してください。",
        "table_range": "範囲",
        "remove": "削除",
        "listeners_title": "待ち受け",
        "listeners_empty": "この範囲で待ち受けているプロセスはありません。",
        "listeners_scanning": "スキャン中…",
        "table_port": "ポート",
        "table_process": "プロセス",
        "table_pid": "PID",
        "table_started": "起動",
        "kill": "終了",
        "kill_confirm_title": "プロセスの終了",
        "kill_confirm_body": "PID {pid} を終了しますか?",
        "tray_show": "表示",
        "tray_quit": "終了",
        "config_error_title": "設定エラー",
        "config_error_body": (
            "設定ファイルを読み込めませんでした。\n{detail}\n"
            "port-o-potty.config.yaml を修正または削除して再起動してください。"
        ),
        "error.scan_failed.message": "待ち受けの一覧取得に失敗しました: {detail}。",
        "error.scan_failed.action": "前回の結果を表示しています。更新して再試行してください。",
        "error.kill_failed.message": "PID {pid} を終了できませんでした: {detail}。",
        "error.kill_failed.action": "プロセスが存在し、権限があることを確認してください。",
        "error.invalid_pid.message": "PID {pid} は終了できません。",
        "error.invalid_pid.action": "通常のプロセスが所有する待ち受けを選択してください。",
        "error.ranges_not_saved.message": "ポート範囲を保存できませんでした: {detail}。",
        "error.ranges_not_saved.action": "ファイルの権限を確認してください。変更は終了時に失われます。",
    },
}


DEFAULT_LANGUAGE = "en"


def detect_language() -> str:
    """Return the UI language code based on OS locale."""
    if QLocale.system().language() == QLocale.Language.Japanese:
        return "ja"
    return DEFAULT_LANGUAGE


def translate(key: str, lang: str | None = None) -> str:
    """Simple dictionary lookup with English fallback."""
    language = lang or detect_language()
    catalog = _TRANSLATIONS.get(language, _TRANSLATIONS[DEFAULT_LANGUAGE])
    if key in catalog:
        return catalog[key]
    return _TRANSLATIONS[DEFAULT_LANGUAGE].get(key, key)


def _format_template(template: str, context: Dict[str, str]) -> str:
    try:
        return template.format(**context)
    except KeyError:
        return template


def format_error_record(record: ErrorRecord, lang: str | None = None) -> str:
    """Return a localized string combining code, message, and action."""

    language = lang or detect_language()
    message = _format_template(translate(record.message_key, language), record.context)
    action = _format_template(translate(record.action_key, language), record.context)
    action_label = translate("error_action_label", language)
    return f"[{record.code}] {message} ({action_label}: {action})"
