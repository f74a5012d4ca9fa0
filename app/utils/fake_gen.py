from faker import Faker
from faker.providers import BaseProvider


class ShopProvider(BaseProvider):
    """
    演示数据生成器
    生成泰语商品名与配送方式
    """

    # 商品品类
    product_types = [
        'เสื้อยืด', 'กางเกงยีนส์', 'รองเท้าผ้าใบ', 'กระเป๋าสะพาย', 'หมวกแก๊ป',
        'นาฬิกาข้อมือ', 'แก้วน้ำเก็บความเย็น', 'หูฟังไร้สาย', 'สายชาร์จ', 'เคสโทรศัพท์'
    ]

    # 修饰词
    product_styles = [
        'รุ่นพิเศษ', 'สีดำ', 'สีขาว', 'ไซส์ใหญ่', 'ลายลิมิเต็ด', 'พรีเมียม', 'คลาสสิก'
    ]

    shipping_methods = ['Kerry Express', 'Flash Express', 'ไปรษณีย์ไทย EMS', 'J&T Express']

    def shop_product_name(self):
        """生成商品名"""
        return f"{self.random_element(self.product_types)} {self.random_element(self.product_styles)}"

    def shipping_method(self):
        return self.random_element(self.shipping_methods)

    def tracking_number(self):
        return f"TH{self.random_number(digits=10, fix_len=True)}"


# 初始化 Faker 并添加自定义 Provider
fake = Faker('th_TH')
fake.add_provider(ShopProvider)
