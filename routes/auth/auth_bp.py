"""
Blueprint de autenticación

Login, registro, recuperación de contraseña, logout y perfil del usuario,
todo contra Supabase Auth.
"""
import logging

from flask import Blueprint, render_template, request, redirect, session, url_for, g

import helpers
from dominio import User, ValidationError
from services import auth_service, perfil_service
from utils.messages import flash_success, flash_error, flash_info, flash_validacion

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


# ============================================
# LOGIN / LOGOUT
# ============================================

@auth_bp.route("/", methods=["GET", "POST"])
def login():
    if "usuario" in session:
        return redirect("/home")

    if request.method == "POST":
        email = (request.form.get("email") or "").strip()
        contrasena = request.form.get("contrasena")
        if not email or not contrasena:
            return render_template("login.html", error="Email y contraseña requeridos", email=email)

        try:
            sesion_auth = auth_service.sign_in(email, contrasena)
        except auth_service.AuthError as e:
            return render_template("login.html", error=str(e), email=email)

        token = sesion_auth.get("access_token")
        perfil = perfil_service.obtener_perfil(sesion_auth["user"]["id"], token)
        usuario = User.from_auth_data(sesion_auth["user"], perfil)

        if not usuario.is_active:
            auth_service.sign_out(token)
            return render_template("login.html", error="Tu cuenta está desactivada", email=email)

        if perfil is None:
            perfil_service.guardar_perfil(usuario, token)

        usuario.update_last_login()
        helpers.guardar_sesion(sesion_auth, usuario)
        logger.info(f"🔑 Login de {usuario.email} ({usuario.role})")
        return redirect("/home")

    return render_template("login.html", error=None, email="")


@auth_bp.route("/logout")
def logout():
    try:
        auth_service.sign_out(session.get("access_token"))
    except auth_service.AuthError as e:
        logger.warning(f"⚠️ Error cerrando sesión en Supabase: {str(e)}")
    session.clear()
    return redirect("/")


# ============================================
# REGISTRO
# ============================================

@auth_bp.route("/registro", methods=["GET", "POST"])
def registro():
    if request.method == "POST":
        email = (request.form.get("email") or "").strip()
        contrasena = request.form.get("contrasena") or ""
        confirmar = request.form.get("confirmar") or ""
        full_name = (request.form.get("full_name") or "").strip()
        datos_form = {"email": email, "full_name": full_name}

        if contrasena != confirmar:
            flash_error("Las contraseñas no coinciden")
            return render_template("registro.html", datos=datos_form)

        metadata = {"full_name": full_name} if full_name else {}
        try:
            resultado = auth_service.sign_up(email, contrasena, metadata)
        except auth_service.AuthError as e:
            flash_error(str(e))
            return render_template("registro.html", datos=datos_form)

        token = resultado.get("access_token")
        if not token:
            # Supabase requiere confirmar el email antes de emitir sesión
            flash_info("Cuenta creada. Revisa tu email para confirmarla antes de iniciar sesión.")
            return redirect(url_for("auth.login"))

        usuario = User.from_auth_data(resultado.get("user") or {}, {"full_name": full_name})
        perfil_service.guardar_perfil(usuario, token)
        helpers.guardar_sesion(resultado, usuario)
        flash_success("Cuenta creada correctamente")
        return redirect("/home")

    return render_template("registro.html", datos={})


@auth_bp.route("/recuperar", methods=["GET", "POST"])
def recuperar():
    if request.method == "POST":
        email = (request.form.get("email") or "").strip()
        if not email:
            flash_error("Ingresa tu email")
            return render_template("recuperar.html")

        try:
            auth_service.reset_password(email)
        except auth_service.AuthError as e:
            # No se revela si el email existe; solo se registra
            logger.warning(f"⚠️ Error en recuperación de contraseña: {str(e)}")

        flash_success("Si el email está registrado recibirás instrucciones para restablecer tu contraseña")
        return redirect(url_for("auth.login"))

    return render_template("recuperar.html")


# ============================================
# PERFIL
# ============================================

@auth_bp.route("/perfil", methods=["GET", "POST"])
@helpers.login_required
def perfil():
    try:
        usuario = perfil_service.cargar_usuario(auth_service.get_user(g.access_token), g.access_token)
    except auth_service.AuthError as e:
        flash_error(str(e))
        return redirect("/home")

    if request.method == "POST":
        try:
            usuario.update_profile(
                full_name=request.form.get("full_name"),
                phone=request.form.get("phone"),
                company=request.form.get("company"),
            )
        except ValidationError as e:
            flash_validacion(e)
            return render_template("perfil.html", usuario=usuario, stats=usuario.stats())

        nueva_contrasena = request.form.get("nueva_contrasena")
        try:
            auth_service.update_profile(g.access_token, {"full_name": usuario.full_name})
            if nueva_contrasena:
                auth_service.update_password(g.access_token, nueva_contrasena)
        except auth_service.AuthError as e:
            flash_error(str(e))
            return render_template("perfil.html", usuario=usuario, stats=usuario.stats())

        perfil_service.guardar_perfil(usuario, g.access_token)
        session["usuario"] = usuario.display_name()
        flash_success("Perfil actualizado correctamente")
        return redirect(url_for("auth.perfil"))

    return render_template("perfil.html", usuario=usuario, stats=usuario.stats())
