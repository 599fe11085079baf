# storefront/admin/admin.py

from typing import Optional
from fastapi import APIRouter, Depends, Form, Query, Request, status
from pydantic import ValidationError
from sqlmodel import Session

from storefront.auth.auth import get_current_user
from storefront.core.exceptions.app_exception import AppHttpException
from storefront.core.middlewares.users import is_admin
from storefront.core.templates import redirect, render
from storefront.database.connection import get_session
from storefront.enums.order_status import OrderStatus
from storefront.enums.payment_status import PaymentStatus
from storefront.models.user import User
from storefront.schemas.product import ProductCreate, ProductUpdate
from storefront.services import order_service, payment_service, product_service, user_service

db_session = get_session


def parse_status(enum_cls, value: Optional[str]):
    if not value:
        return None
    try:
        return enum_cls(value.strip().upper())
    except ValueError:
        return None


def product_form_data(name, description, price, stock_quantity, category, image_url, is_active) -> dict:
    return {
        "name": (name or "").strip(),
        "description": (description or "").strip() or None,
        "price": price,
        "stock_quantity": stock_quantity or 0,
        "category": (category or "").strip().upper(),
        "image_url": (image_url or "").strip() or None,
        "is_active": is_active is not None,
    }


def form_errors(error: ValidationError) -> str:
    return "; ".join(f"{err['loc'][-1]}: {err['msg']}" for err in error.errors())


class AdminRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/admin", self.dashboard, methods=["GET"], include_in_schema=False)

        self.add_api_route("/admin/products", self.list_products, methods=["GET"], include_in_schema=False)
        self.add_api_route("/admin/products/add", self.add_product_page, methods=["GET"], include_in_schema=False)
        self.add_api_route("/admin/products/add", self.add_product, methods=["POST"], include_in_schema=False)
        self.add_api_route("/admin/products/edit/{product_id}", self.edit_product_page, methods=["GET"], include_in_schema=False)
        self.add_api_route("/admin/products/edit/{product_id}", self.edit_product, methods=["POST"], include_in_schema=False)
        self.add_api_route("/admin/products/toggle-status/{product_id}", self.toggle_product_status, methods=["POST"], include_in_schema=False)
        self.add_api_route("/admin/products/update-stock/{product_id}", self.update_stock, methods=["POST"], include_in_schema=False)

        self.add_api_route("/admin/orders", self.list_orders, methods=["GET"], include_in_schema=False)
        self.add_api_route("/admin/orders/update-status/{order_id}", self.update_order_status, methods=["POST"], include_in_schema=False)

        self.add_api_route("/admin/payments", self.list_payments, methods=["GET"], include_in_schema=False)
        self.add_api_route("/admin/payments/refund/{payment_id}", self.refund_payment, methods=["POST"], include_in_schema=False)

        self.add_api_route("/admin/users", self.list_users, methods=["GET"], include_in_schema=False)
        self.add_api_route("/admin/users/toggle-active/{user_id}", self.toggle_user_active, methods=["POST"], include_in_schema=False)

    def dashboard(self, request: Request, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        is_admin(current_user)

        return render(request, "admin/dashboard.html", {
            "total_products": product_service.count_active_products(session),
            "total_users": user_service.count_users(session),
            "total_orders": order_service.count_orders(session),
            "pending_orders": order_service.count_orders(session, OrderStatus.PENDING),
            "total_revenue": payment_service.get_total_revenue(session),
            "recent_orders": order_service.get_recent_orders(session, limit=5),
        })

    # Products

    def list_products(
        self,
        request: Request,
        page: int = 0,
        size: Optional[int] = None,
        sort_by: str = "name",
        sort_dir: str = "asc",
        search: Optional[str] = None,
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        is_admin(current_user)

        product_page = product_service.get_all_products_including_inactive(session, page, size, sort_by, sort_dir, search)
        return render(request, "admin/products.html", {
            "product_page": product_page,
            "products": product_page.items,
            "search": search or "",
            "sort_by": sort_by if sort_by in product_service.SORTABLE_FIELDS else product_service.DEFAULT_SORT,
            "sort_dir": "desc" if sort_dir.lower() == "desc" else "asc",
        })

    def add_product_page(self, request: Request, current_user: User = Depends(get_current_user)):
        is_admin(current_user)
        return render(request, "admin/product_form.html", {
            "product": None,
            "form": {"is_active": True, "stock_quantity": 0},
            "action": "/admin/products/add",
        })

    def add_product(
        self,
        request: Request,
        name: str = Form(""),
        description: Optional[str] = Form(None),
        price: str = Form(""),
        stock_quantity: str = Form("0"),
        category: str = Form(""),
        image_url: Optional[str] = Form(None),
        is_active: Optional[str] = Form(None),
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        is_admin(current_user)

        form = product_form_data(name, description, price, stock_quantity, category, image_url, is_active)
        try:
            product = product_service.create_product(session, ProductCreate(**form))
        except ValidationError as e:
            return render(request, "admin/product_form.html", {
                "product": None,
                "form": form,
                "action": "/admin/products/add",
                "error": form_errors(e),
            }, status_code=status.HTTP_400_BAD_REQUEST)

        return redirect("/admin/products", success=f"Product '{product.name}' added successfully")

    def edit_product_page(self, request: Request, product_id: int, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        is_admin(current_user)

        product = product_service.get_product_by_id(session, product_id)
        if not product:
            return redirect("/admin/products", error="Product not found")

        return render(request, "admin/product_form.html", {
            "product": product,
            "form": product.model_dump(),
            "action": f"/admin/products/edit/{product.id}",
        })

    def edit_product(
        self,
        request: Request,
        product_id: int,
        name: str = Form(""),
        description: Optional[str] = Form(None),
        price: str = Form(""),
        stock_quantity: str = Form("0"),
        category: str = Form(""),
        image_url: Optional[str] = Form(None),
        is_active: Optional[str] = Form(None),
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        is_admin(current_user)

        form = product_form_data(name, description, price, stock_quantity, category, image_url, is_active)
        try:
            product = product_service.update_product(session, product_id, ProductUpdate(**form))
        except ValidationError as e:
            return render(request, "admin/product_form.html", {
                "product": product_service.get_product_by_id(session, product_id),
                "form": form,
                "action": f"/admin/products/edit/{product_id}",
                "error": form_errors(e),
            }, status_code=status.HTTP_400_BAD_REQUEST)
        except AppHttpException as e:
            return redirect("/admin/products", error=e.detail)

        return redirect("/admin/products", success=f"Product '{product.name}' updated successfully")

    def toggle_product_status(self, product_id: int, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        is_admin(current_user)
        try:
            product = product_service.toggle_product_status(session, product_id)
        except AppHttpException as e:
            return redirect("/admin/products", error=e.detail)

        state = "activated" if product.is_active else "deactivated"
        return redirect("/admin/products", success=f"Product '{product.name}' {state}")

    def update_stock(
        self,
        product_id: int,
        stock_quantity: int = Form(...),
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        is_admin(current_user)
        try:
            product = product_service.update_stock(session, product_id, stock_quantity)
        except AppHttpException as e:
            return redirect("/admin/products", error=e.detail)

        return redirect("/admin/products", success=f"Stock for '{product.name}' updated to {product.stock_quantity}")

    # Orders

    def list_orders(
        self,
        request: Request,
        order_status: Optional[str] = Query(None, alias="status"),
        page: int = 0,
        size: Optional[int] = None,
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        is_admin(current_user)

        selected_status = parse_status(OrderStatus, order_status)
        if selected_status:
            order_page = order_service.get_orders_by_status(session, selected_status, page, size)
        else:
            order_page = order_service.get_all_orders(session, page, size)

        return render(request, "admin/orders.html", {
            "order_page": order_page,
            "orders": order_page.items,
            "order_statuses": list(OrderStatus),
            "selected_status": selected_status,
        })

    def update_order_status(
        self,
        order_id: int,
        order_status: str = Form(..., alias="status"),
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        is_admin(current_user)

        new_status = parse_status(OrderStatus, order_status)
        if not new_status:
            return redirect("/admin/orders", error=f"Invalid order status: {order_status}")

        try:
            order = order_service.update_order_status(session, order_id, new_status)
        except AppHttpException as e:
            return redirect("/admin/orders", error=e.detail)

        return redirect("/admin/orders", success=f"Order {order.code} is now {order.status.display_name}")

    # Payments

    def list_payments(
        self,
        request: Request,
        payment_status: Optional[str] = Query(None, alias="status"),
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        is_admin(current_user)

        selected_status = parse_status(PaymentStatus, payment_status)
        if selected_status:
            payments = payment_service.get_payments_by_status(session, selected_status)
        else:
            payments = payment_service.get_all_payments(session)

        return render(request, "admin/payments.html", {
            "payments": payments,
            "payment_statuses": list(PaymentStatus),
            "selected_status": selected_status,
        })

    def refund_payment(self, payment_id: int, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        is_admin(current_user)
        try:
            payment = payment_service.refund_payment(session, payment_id)
        except AppHttpException as e:
            return redirect("/admin/payments", error=e.detail)

        return redirect("/admin/payments", success=f"Payment {payment.transaction_id} refunded")

    # Users

    def list_users(self, request: Request, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        is_admin(current_user)
        return render(request, "admin/users.html", {
            "users": user_service.get_all_users(session),
        })

    def toggle_user_active(self, user_id: int, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        is_admin(current_user)
        try:
            user = user_service.toggle_user_active(session, user_id, current_user)
        except AppHttpException as e:
            return redirect("/admin/users", error=e.detail)

        state = "activated" if user.is_active else "deactivated"
        return redirect("/admin/users", success=f"User '{user.username}' {state}")
