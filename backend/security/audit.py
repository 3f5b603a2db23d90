"""
Audit logging for custodial wallet activity.
Records every wallet creation and funds-moving step for forensics and support.
"""
import logging
import sqlite3
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class AuditEventType(Enum):
    """Types of events to audit."""
    # Wallets
    WALLET_CREATED = "wallet_created"

    # Preflight
    PREFLIGHT_REJECTED = "preflight_rejected"

    # Transactions
    WITHDRAWAL_SUBMITTED = "withdrawal_submitted"
    WITHDRAWAL_CONFIRMED = "withdrawal_confirmed"
    BET_SUBMITTED = "bet_submitted"
    BET_SETTLED = "bet_settled"

    # Failures
    TX_REVERTED = "tx_reverted"
    TX_TIMEOUT = "tx_timeout"
    DECODE_MISMATCH = "decode_mismatch"
    CHAIN_UNAVAILABLE = "chain_unavailable"
    CONTRACT_REJECTED = "contract_rejected"


class AuditSeverity(Enum):
    """Severity levels for audit events."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class AuditLogger:
    """Audit log stored next to the wallets in sqlite."""

    def __init__(self, db_path: str = "wallets.db"):
        self.db_path = db_path
        self._init_audit_table()

    def _init_audit_table(self):
        """Initialize audit log table."""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS audit_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                event_type TEXT NOT NULL,
                user_id TEXT,
                details TEXT,
                severity TEXT NOT NULL,
                timestamp TEXT NOT NULL
            )
        """)

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_logs(timestamp)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_audit_user ON audit_logs(user_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_audit_event_type ON audit_logs(event_type)")

        conn.commit()
        conn.close()

    def log(
        self,
        event_type: AuditEventType,
        severity: AuditSeverity = AuditSeverity.INFO,
        user_id: Optional[str] = None,
        details: Optional[str] = None,
    ):
        """Record an event. Never raises.

        Args:
            event_type: Type of event
            severity: Severity level
            user_id: Chat user ID if applicable
            details: Free text (addresses, amounts, tx hashes; never key material)
        """
        user_id = str(user_id) if user_id is not None else None
        try:
            conn = sqlite3.connect(self.db_path)
            try:
                conn.execute("""
                    INSERT INTO audit_logs (event_type, user_id, details, severity, timestamp)
                    VALUES (?, ?, ?, ?, ?)
                """, (
                    event_type.value,
                    user_id,
                    details,
                    severity.value,
                    datetime.utcnow().isoformat(),
                ))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Failed to write audit log: {e}", exc_info=True)

        log_msg = f"[AUDIT] {event_type.value}"
        if user_id:
            log_msg += f" | user={user_id}"
        if details:
            log_msg += f" | {details}"

        if severity == AuditSeverity.CRITICAL:
            logger.critical(log_msg)
        elif severity == AuditSeverity.WARNING:
            logger.warning(log_msg)
        else:
            logger.info(log_msg)

    def get_recent_events(
        self,
        limit: int = 100,
        severity: Optional[AuditSeverity] = None,
        event_type: Optional[AuditEventType] = None,
        user_id: Optional[str] = None,
    ) -> list:
        """Get recent audit events, newest first."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()

        query = "SELECT * FROM audit_logs WHERE 1=1"
        params = []

        if severity:
            query += " AND severity = ?"
            params.append(severity.value)

        if event_type:
            query += " AND event_type = ?"
            params.append(event_type.value)

        if user_id is not None:
            query += " AND user_id = ?"
            params.append(str(user_id))

        query += " ORDER BY id DESC LIMIT ?"
        params.append(limit)

        cursor.execute(query, params)
        rows = cursor.fetchall()
        conn.close()

        return [dict(row) for row in rows]

    def get_summary(self, hours: int = 24) -> dict:
        """Counts by severity and event type for the last N hours."""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cutoff = (datetime.utcnow() - timedelta(hours=hours)).isoformat()

        cursor.execute("""
            SELECT severity, COUNT(*) as count
            FROM audit_logs
            WHERE timestamp > ?
            GROUP BY severity
        """, (cutoff,))
        severity_counts = dict(cursor.fetchall())

        cursor.execute("""
            SELECT event_type, COUNT(*) as count
            FROM audit_logs
            WHERE timestamp > ?
            GROUP BY event_type
            ORDER BY count DESC
        """, (cutoff,))
        event_counts = dict(cursor.fetchall())

        conn.close()

        return {
            "period_hours": hours,
            "severity_counts": severity_counts,
            "events": event_counts,
            "total_critical": severity_counts.get("critical", 0),
            "total_warnings": severity_counts.get("warning", 0),
            "unknown_outcomes": event_counts.get(AuditEventType.TX_TIMEOUT.value, 0),
        }
