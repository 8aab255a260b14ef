"""
統合テストパッケージ

実際のgitリポジトリを使用したgit-commit-mの統合テストを提供します。

このパッケージには以下のテストモジュールが含まれています：
- test_end_to_end: ステージングからコミットまでのエンドツーエンドテスト
"""
