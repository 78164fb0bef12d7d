# ged/utils/email.py
from flask import current_app
from flask_mail import Message
from markupsafe import escape

from ged import mail


def send_share_link(recipient, document, share_url, expires_at=None, sender_user=None):
    """Envoie le lien de partage par email. Un échec d'envoi est journalisé, pas levé."""
    sender_name = sender_user.display_name if sender_user else "GED"
    expiry_text = (
        f"Ce lien expire le {expires_at.strftime('%d/%m/%Y à %H:%M')} (UTC)."
        if expires_at else "Ce lien n'expire pas."
    )
    safe_sender = escape(sender_name)
    safe_name = escape(document.name)
    safe_url = escape(share_url)

    html_body = f"""
    <!DOCTYPE html>
    <html lang="fr">
    <head><meta charset="UTF-8"><title>Document partagé</title></head>
    <body style="margin:0; padding:0; background:#f8f9fa; font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;">
      <table width="100%" cellpadding="0" cellspacing="0" style="background:#f8f9fa; padding:40px 20px;">
        <tr>
          <td align="center">
            <table width="100%" cellpadding="0" cellspacing="0" style="max-width:620px; background:#ffffff; border-radius:16px;">
              <tr>
                <td style="padding:40px;">
                  <h2 style="color:#003087; margin-top:0;">Document partagé</h2>
                  <p style="color:#333; font-size:16px;">
                    <strong>{safe_sender}</strong> vous a partagé le document :
                  </p>
                  <div style="background:#f0f7ff; border-left:6px solid #0066cc; padding:20px; border-radius:8px;">
                    <h3 style="color:#003087; margin:0;">{safe_name}</h3>
                  </div>
                  <div style="text-align:center; margin:35px 0;">
                    <a href="{safe_url}" style="background:#0066cc; color:#ffffff; padding:16px 36px; text-decoration:none; border-radius:50px;">
                      Ouvrir le document
                    </a>
                  </div>
                  <p style="color:#888; font-size:14px;">{expiry_text}</p>
                </td>
              </tr>
            </table>
          </td>
        </tr>
      </table>
    </body>
    </html>
    """

    msg = Message(
        subject=f"Document partagé : {document.name}",
        recipients=[recipient],
        body=f"{sender_name} vous a partagé « {document.name} » : {share_url}\n{expiry_text}",
        html=html_body,
    )
    try:
        mail.send(msg)
        return True
    except Exception as e:
        current_app.logger.error(f"Échec envoi email de partage à {recipient} : {e}")
        return False
