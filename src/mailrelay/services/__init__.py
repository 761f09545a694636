from .doctor import run_doctor_checks
from .relay import RelayResult, RelayService
from .spool import MailSpooler

__all__ = ["MailSpooler", "RelayResult", "RelayService", "run_doctor_checks"]
