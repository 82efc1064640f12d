from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from dependencies import ensure_staff, get_current_user
from models.notification import NotificationType
from models.support import SupportTicket, TicketStatus
from models.user import User, STAFF_ROLES
from schemas.support import TicketCreate, TicketOut, TicketUpdate
from services.notifications import notify_user

router = APIRouter(prefix="/api/support", tags=["Support"])


@router.post("/", response_model=TicketOut, status_code=201)
def create_ticket(
    data: TicketCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ticket = SupportTicket(user_id=current_user.id, subject=data.subject.strip(), message=data.message.strip())
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    return ticket


@router.get("/", response_model=list[TicketOut])
def list_tickets(
    status: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    q = db.query(SupportTicket)
    if current_user.role not in STAFF_ROLES:
        q = q.filter(SupportTicket.user_id == current_user.id)
    if status:
        try:
            q = q.filter(SupportTicket.status == TicketStatus(status))
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid ticket status")
    return q.order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc()).all()


@router.put("/{ticket_id}", response_model=TicketOut)
def update_ticket(
    ticket_id: int,
    data: TicketUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Staff reply and/or status change."""
    ensure_staff(current_user)
    ticket = db.query(SupportTicket).filter(SupportTicket.id == ticket_id).first()
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    if data.status is not None:
        try:
            ticket.status = TicketStatus(data.status)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid ticket status")
    if data.reply is not None:
        ticket.reply = data.reply.strip()
        ticket.replied_by_id = current_user.id
        if data.status is None and ticket.status == TicketStatus.open:
            ticket.status = TicketStatus.in_progress
        owner = db.query(User).filter(User.id == ticket.user_id).first()
        if owner:
            notify_user(db, owner, NotificationType.system, "Support Reply", f"New reply on ticket #{ticket.id}: {ticket.subject}")
    db.commit()
    db.refresh(ticket)
    return ticket
