"""
Spot Price Mirror Service

Coinbase 호환 REST API에서 암호화폐 현물 시세를 주기적으로 폴링하여
메모리 캐시에 보관하고, 동일한 형식의 REST 엔드포인트로 제공하는 서비스입니다.

Architecture:
- 추적 통화쌍 9개 (BTC-USD, BTC-EUR, ...) 동시 조회
- 2.5초 기본 폴링 간격, 429 발생 시 최대 20초까지 백오프
- 60초 이상 갱신되지 않은 시세는 stale 처리
"""

__version__ = "1.0.0"
