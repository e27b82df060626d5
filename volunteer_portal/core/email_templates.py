"""HTML bodies for profile setup emails."""

from html import escape

SETUP_LINK_SUBJECT = "NEEDED: Complete your One Community profile setup"


def setup_link_message(link: str) -> str:
    """Email body inviting the recipient to complete their profile."""
    return f"""<p>Hello,</p>
    <p>Welcome to the One Community Highest Good Network! We're excited to have you as a new member of our team.<br>
    To work as a member of our volunteer team, you need to complete the following profile setup:</p>
    <p><a href="{escape(link, quote=True)}">Click to Complete Profile</a></p>
    <p>Please complete all fields and be accurate. If you have any questions or need assistance during the profile setup process, please contact your manager.</p>
    <p>Thank you and welcome!</p>
    <p>With Gratitude,</p>
    <p>One Community</p>"""


def _location_text(location) -> str:
    if isinstance(location, dict):
        return location.get("userProvided") or ", ".join(
            str(location[key]) for key in ("city", "country") if location.get(key)
        )
    return location or ""


def new_account_subject(account) -> str:
    return f"NEW USER REGISTERED: {account.first_name} {account.last_name}"


def new_account_manager_message(account) -> str:
    """Email body telling the manager which admin steps remain."""
    rows = [
        ("First Name", account.first_name),
        ("Last Name", account.last_name),
        ("Email", account.email),
        ("Phone Number", f"+{account.phone_number}" if account.phone_number else ""),
        ("Collaboration Preference", account.collaboration_preference),
        ("Job Title", account.job_title),
        ("Time Zone", account.time_zone),
        ("Location", _location_text(account.location)),
    ]
    table = "\n".join(
        f"        <tr>\n"
        f"            <td><strong>{label}:</strong></td>\n"
        f"            <td>{escape(str(value or ''))}</td>\n"
        f"        </tr>"
        for label, value in rows
    )
    name = escape(f"{account.first_name} {account.last_name}")
    return f"""
  <p>Hello,</p>
  <p>New User <b style="text-transform: capitalize;">{name}</b> has completed their part of setup.</p>
  <p>These areas need to now be completed by an Admin:</p>
  <ul style="padding-left: 20px;padding-bottom:10px;">
    <li>Weekly Committed Hours</li>
    <li>Admin Document</li>
    <li>Link to Media Files</li>
    <li>Assign Projects</li>
    <li>4-digit Admin Code</li>
    <li>And (if applicable) Assign Team</li>
  </ul>
    <table border="1" cellpadding="10">
{table}
    </table>
    <br>
    <p>Thank you,</p>
    <p>One Community</p>"""
