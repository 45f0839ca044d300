# /clinic/services/email_templates.py
"""Subject, plain-text and HTML bodies for every notification the portal sends.

Each template takes a dict of data and returns ``(subject, text, html)``.
Values are escaped before they reach the HTML body.
"""
import json

from markupsafe import escape

BASE_STYLES = """
  <style>
    .email-container { font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; }
    .email-header { text-align: center; padding: 20px; background: #1e40af; color: white; border-radius: 8px 8px 0 0; }
    .email-content { background-color: #f8fafc; padding: 20px; border-radius: 0 0 8px 8px; }
    .data-table { width: 100%; border-collapse: collapse; margin: 20px 0; background-color: white; }
    .data-table th, .data-table td { padding: 12px; text-align: left; border-bottom: 1px solid #e2e8f0; }
    .timestamp { color: #64748b; font-size: 0.875em; text-align: right; margin-top: 20px; }
    .action-button { display: inline-block; padding: 10px 20px; background-color: #2563eb; color: white;
                     text-decoration: none; border-radius: 6px; margin-top: 20px; }
  </style>
"""


def _rows(pairs):
    return ''.join(
        f"<tr><td>{escape(label)}</td><td>{escape('' if value is None else value)}</td></tr>"
        for label, value in pairs
    )


def _wrap(title, body):
    return f"""
    <html>
      <body>
        {BASE_STYLES}
        <div class="email-container">
          <div class="email-header"><h2 style="margin: 0;">{escape(title)}</h2></div>
          <div class="email-content">{body}</div>
        </div>
      </body>
    </html>
    """


def medical_record(data):
    """data: username, action ('created' or 'updated'), record (dict), timestamp."""
    username = data['username']
    action = data['action']
    record = data.get('record') or {}
    timestamp = data['timestamp']

    subject = f"Medical record {action}"
    text = (
        f"The medical record of {username} was {action}.\n\n"
        f"User: {username}\n"
        f"Time: {timestamp}\n"
        f"Changes: {json.dumps(record, indent=2, default=str)}"
    )
    html = _wrap(subject, f"""
            <p><strong>User:</strong> {escape(username)}</p>
            <table class="data-table">
              <thead><tr><th>Field</th><th>Value</th></tr></thead>
              <tbody>{_rows(record.items())}</tbody>
            </table>
            <div class="timestamp">Updated at: {escape(timestamp)}</div>
    """)
    return subject, text, html


def emergency_contact(data):
    """data: username, contact (dict with name, relationship, phoneNumber), timestamp."""
    username = data['username']
    contact = data.get('contact') or {}
    timestamp = data['timestamp']

    subject = "Emergency contact added"
    text = (
        f"{username} added a new emergency contact.\n\n"
        f"User: {username}\n"
        f"Name: {contact.get('name')}\n"
        f"Relationship: {contact.get('relationship')}\n"
        f"Phone: {contact.get('phoneNumber')}\n"
        f"Time: {timestamp}"
    )
    rows = _rows([
        ('Name', contact.get('name')),
        ('Relationship', contact.get('relationship')),
        ('Phone', contact.get('phoneNumber')),
    ])
    html = _wrap(subject, f"""
            <p><strong>User:</strong> {escape(username)}</p>
            <table class="data-table">
              <tbody>{rows}</tbody>
            </table>
            <div class="timestamp">Added at: {escape(timestamp)}</div>
    """)
    return subject, text, html


def invitation(data):
    """data: url, role, expiry_days."""
    url = data['url']
    role = data.get('role', 'user')
    expiry_days = data.get('expiry_days', 7)

    subject = "You are invited to the clinic portal"
    text = (
        f"You have been invited to join the clinic portal as {role}.\n\n"
        f"Invitation link: {url}\n\n"
        f"This link is valid for {expiry_days} days."
    )
    html = _wrap("Clinic portal invitation", f"""
            <p>Hello,</p>
            <p>You have been invited to join the clinic portal as <strong>{escape(role)}</strong>.</p>
            <p>Use the button below to create your account.</p>
            <a href="{escape(url)}" class="action-button">Create account</a>
            <p style="margin-top: 20px; color: #64748b;">This link is valid for {escape(expiry_days)} days.</p>
    """)
    return subject, text, html


TEMPLATES = {
    'medical_record': medical_record,
    'emergency_contact': emergency_contact,
    'invitation': invitation,
}


def render(name, data):
    """Returns ``(subject, text, html)``. An unknown template name raises KeyError."""
    return TEMPLATES[name](data)
